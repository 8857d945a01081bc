from __future__ import annotations

from typing import TYPE_CHECKING

from fairness.database.exceptions import PersistenceError

if TYPE_CHECKING:
    from fairness.processor.models import Endorsement, ProcessingLogEntry


class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class EndorsementValidationError(ProcessorError):
    """Raised when a request is missing required fields or names an unknown processing type."""


class AuditLogError(PersistenceError):
    """Raised when a processing log entry cannot be appended.

    Carries the already-computed result so callers can still use it.
    """

    def __init__(
        self,
        message: str,
        *,
        endorsement: Endorsement,
        log_entry: ProcessingLogEntry,
    ) -> None:
        super().__init__(message)
        self.endorsement = endorsement
        self.log_entry = log_entry
