from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from fairness.processor.models import Endorsement
from fairness.transformation.models import StageResult


class PipelineState(str, Enum):
    RAW = "raw"
    ANONYMIZING = "anonymizing"
    NORMALIZING = "normalizing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class PipelineContext:
    endorsement: Endorsement
    text: str
    state: PipelineState = PipelineState.RAW
    anonymization: StageResult | None = None
    normalization: StageResult | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
