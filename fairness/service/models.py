from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorType(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"
    PROCESSING = "processing"


@dataclass(frozen=True)
class OperationResult:
    """Structured outcome returned to the controller layer instead of raising."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    error_type: ErrorType | None = None

    @classmethod
    def ok(cls, data: dict[str, Any]) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error_type: ErrorType,
        error: str,
        data: dict[str, Any] | None = None,
    ) -> "OperationResult":
        return cls(success=False, data=data, error=error, error_type=error_type)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        if self.error_type is not None:
            payload["error_type"] = self.error_type.value
        return payload
