"""Statistical consistency scoring of a reviewer's rating history.

Scoring starts at 100 and applies independent deductions, in this order:

1. Always-high: every rating >= 4 (-30).
2. Always-low: every rating <= 2 (-30).
3. High variance: population standard deviation > 1.5 (-20).
4. Recent drift: mean of the last 5 ratings differs from the overall
   mean by more than 1.5 (-15).

The score is clamped to [0, 100] and a reviewer is consistent when the
score is at least 70.
"""

from __future__ import annotations

import statistics
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

from fairness.consistency.models import ConsistencyProfile
from fairness.processor.exceptions import EndorsementValidationError
from fairness.processor.models import Endorsement


class ConsistencyAnalyzer:
    """Pure scorer: the same ordered ratings always give the same profile."""

    MIN_REVIEWS: ClassVar[int] = 3
    CONSISTENT_THRESHOLD: ClassVar[int] = 70

    HIGH_RATING: ClassVar[int] = 4
    LOW_RATING: ClassVar[int] = 2
    MAX_STANDARD_DEVIATION: ClassVar[float] = 1.5
    RECENT_WINDOW: ClassVar[int] = 5
    RECENT_MIN_RATINGS: ClassVar[int] = 3
    MAX_RECENT_DRIFT: ClassVar[float] = 1.5

    ALWAYS_HIGH_PENALTY: ClassVar[int] = 30
    ALWAYS_LOW_PENALTY: ClassVar[int] = 30
    VARIANCE_PENALTY: ClassVar[int] = 20
    DRIFT_PENALTY: ClassVar[int] = 15

    ALWAYS_HIGH_ISSUE: ClassVar[str] = "Always gives high ratings (4-5 stars)"
    ALWAYS_LOW_ISSUE: ClassVar[str] = "Always gives low ratings (1-2 stars)"
    VARIANCE_ISSUE: ClassVar[str] = "High variance in ratings (inconsistent scoring)"
    DRIFT_ISSUE: ClassVar[str] = (
        "Recent ratings significantly different from historical average"
    )

    def analyze(
        self,
        reviewer_id: str,
        ratings: Sequence[int],
        analyzed_at: datetime | None = None,
    ) -> ConsistencyProfile:
        """Score *ratings*, ordered oldest first.

        Raises:
            EndorsementValidationError: if a rating is not an integer in 1..5.
        """
        ratings = list(ratings)
        self._validate(ratings)
        analyzed_at = analyzed_at or datetime.now(timezone.utc)

        if len(ratings) < self.MIN_REVIEWS:
            return ConsistencyProfile(
                reviewer_id=reviewer_id,
                total_reviews=len(ratings),
                average_rating=0.0,
                standard_deviation=0.0,
                consistency_score=None,
                is_consistent=True,
                last_analyzed_at=analyzed_at,
            )

        mean = statistics.fmean(ratings)
        stddev = statistics.pstdev(ratings)

        score = 100
        issues: list[str] = []

        if all(rating >= self.HIGH_RATING for rating in ratings):
            score -= self.ALWAYS_HIGH_PENALTY
            issues.append(self.ALWAYS_HIGH_ISSUE)

        if all(rating <= self.LOW_RATING for rating in ratings):
            score -= self.ALWAYS_LOW_PENALTY
            issues.append(self.ALWAYS_LOW_ISSUE)

        if stddev > self.MAX_STANDARD_DEVIATION:
            score -= self.VARIANCE_PENALTY
            issues.append(self.VARIANCE_ISSUE)

        recent = ratings[-self.RECENT_WINDOW:]
        if len(recent) >= self.RECENT_MIN_RATINGS:
            recent_mean = statistics.fmean(recent)
            if abs(recent_mean - mean) > self.MAX_RECENT_DRIFT:
                score -= self.DRIFT_PENALTY
                issues.append(self.DRIFT_ISSUE)

        score = max(0, min(100, score))
        return ConsistencyProfile(
            reviewer_id=reviewer_id,
            total_reviews=len(ratings),
            average_rating=_round_half_up(mean),
            standard_deviation=_round_half_up(stddev),
            consistency_score=score,
            is_consistent=score >= self.CONSISTENT_THRESHOLD,
            issues=issues,
            last_analyzed_at=analyzed_at,
        )

    def analyze_endorsements(
        self,
        reviewer_id: str,
        endorsements: Iterable[Endorsement],
        analyzed_at: datetime | None = None,
    ) -> ConsistencyProfile:
        """Sort *endorsements* chronologically and score their star ratings."""
        return self.analyze(
            reviewer_id,
            ratings_in_chronological_order(endorsements),
            analyzed_at,
        )

    @staticmethod
    def _validate(ratings: list[int]) -> None:
        for index, rating in enumerate(ratings):
            if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
                raise EndorsementValidationError(
                    f"Rating at index {index} must be an integer between 1 and 5, got {rating!r}"
                )


def _round_half_up(value: float) -> float:
    """Round to 2 places with exact halves going up (2.125 -> 2.13)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def ratings_in_chronological_order(endorsements: Iterable[Endorsement]) -> list[int]:
    """Return star ratings sorted by creation time, oldest first.

    Equal timestamps are ordered by endorsement id. Records without a
    creation time sort first. Records without a rating are skipped.
    """
    rated = [e for e in endorsements if e.star_rating is not None]
    rated.sort(key=_chronological_key)
    return [e.star_rating for e in rated if e.star_rating is not None]


def _chronological_key(endorsement: Endorsement) -> tuple[bool, datetime, str]:
    created_at = endorsement.created_at
    if created_at is None:
        return (False, datetime.min.replace(tzinfo=timezone.utc), str(endorsement.id))
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (True, created_at, str(endorsement.id))
