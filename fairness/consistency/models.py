from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ConsistencyProfile:
    """Fairness profile of one reviewer's rating history.

    Keyed by reviewer; recomputed and replaced, never appended.
    """

    reviewer_id: str
    total_reviews: int
    average_rating: float
    standard_deviation: float
    consistency_score: int | None
    is_consistent: bool
    last_analyzed_at: datetime
    issues: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.consistency_score is None:
            return "Insufficient data for consistency check"
        if self.issues:
            return f"Consistency issues: {', '.join(self.issues)}"
        return "Reviewer shows consistent rating patterns"
