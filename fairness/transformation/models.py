from dataclasses import dataclass
from enum import Enum


class StageOutcome(str, Enum):
    """How a single pipeline stage produced its text."""

    REMOTE_SUCCESS = "remote_success"
    FALLBACK_USED = "fallback_used"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StageResult:
    """Text produced by one pipeline stage, tagged with its outcome."""

    text: str
    outcome: StageOutcome
    error_message: str | None = None

    @property
    def degraded(self) -> bool:
        return self.outcome in (StageOutcome.FALLBACK_USED, StageOutcome.FAILED)


@dataclass(frozen=True)
class TransformationInstruction:
    """What the remote capability is asked to do with a piece of text."""

    name: str
    system_prompt: str
    prompt_template: str
    temperature: float = 0.0
    max_tokens: int | None = None

    def render(self, text: str) -> str:
        return self.prompt_template.replace("{text}", text)
