from datetime import datetime, timedelta, timezone

import pytest

from fairness.consistency.analyzer import ConsistencyAnalyzer, ratings_in_chronological_order
from fairness.processor.exceptions import EndorsementValidationError
from fairness.processor.models import Endorsement

_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _analyze(ratings: list[int]):
    return ConsistencyAnalyzer().analyze("reviewer-1", ratings, analyzed_at=_NOW)


class TestInsufficientData:
    @pytest.mark.parametrize("ratings", [[], [3], [3, 4]])
    def test_returns_unscored_consistent_profile(self, ratings: list[int]) -> None:
        profile = _analyze(ratings)
        assert profile.consistency_score is None
        assert profile.is_consistent is True
        assert profile.issues == []
        assert profile.total_reviews == len(ratings)
        assert profile.average_rating == 0.0
        assert profile.standard_deviation == 0.0
        assert profile.message == "Insufficient data for consistency check"


class TestDeductions:
    def test_balanced_history_scores_full_marks(self) -> None:
        profile = _analyze([3, 4, 3, 4, 3])
        assert profile.consistency_score == 100
        assert profile.is_consistent is True
        assert profile.issues == []
        assert profile.average_rating == 3.4
        assert profile.message == "Reviewer shows consistent rating patterns"

    def test_always_high_is_consistent_at_threshold(self) -> None:
        profile = _analyze([5, 5, 5, 5, 5])
        assert profile.consistency_score == 70
        assert profile.is_consistent is True
        assert profile.issues == [ConsistencyAnalyzer.ALWAYS_HIGH_ISSUE]

    def test_always_low_is_consistent_at_threshold(self) -> None:
        profile = _analyze([1, 1, 1, 1, 1])
        assert profile.consistency_score == 70
        assert profile.is_consistent is True
        assert profile.issues == [ConsistencyAnalyzer.ALWAYS_LOW_ISSUE]

    def test_high_variance(self) -> None:
        profile = _analyze([1, 5, 1, 5, 1])
        assert profile.consistency_score == 80
        assert profile.issues == [ConsistencyAnalyzer.VARIANCE_ISSUE]
        assert profile.average_rating == 2.6
        assert profile.standard_deviation == 1.96

    def test_recent_drift(self) -> None:
        profile = _analyze([4] * 20 + [2] * 5)
        assert profile.consistency_score == 85
        assert profile.is_consistent is True
        assert profile.issues == [ConsistencyAnalyzer.DRIFT_ISSUE]

    def test_variance_and_drift_make_reviewer_inconsistent(self) -> None:
        profile = _analyze([5] * 10 + [1] * 5)
        assert profile.consistency_score == 65
        assert profile.is_consistent is False
        assert profile.issues == [
            ConsistencyAnalyzer.VARIANCE_ISSUE,
            ConsistencyAnalyzer.DRIFT_ISSUE,
        ]
        assert profile.message.startswith("Consistency issues: High variance")

    def test_drift_depends_on_rating_order(self) -> None:
        profile = _analyze([1] * 5 + [5] * 10)
        assert ConsistencyAnalyzer.DRIFT_ISSUE not in profile.issues

    def test_rounds_statistics_to_two_decimals(self) -> None:
        profile = _analyze([1, 2, 2])
        assert profile.average_rating == 1.67
        assert profile.standard_deviation == 0.47
        assert profile.consistency_score == 70

    @pytest.mark.parametrize(
        ("ratings", "expected"),
        [
            ([1, 1, 1, 2, 3, 3, 3, 3], 2.13),
            ([1, 1, 2, 3, 3, 3, 4, 4], 2.63),
        ],
    )
    def test_rounds_exact_halves_up(self, ratings: list[int], expected: float) -> None:
        assert _analyze(ratings).average_rating == expected


class TestPurity:
    def test_same_input_gives_same_profile(self) -> None:
        ratings = [4, 2, 5, 3, 1, 4]
        assert _analyze(ratings) == _analyze(ratings)

    def test_does_not_mutate_input(self) -> None:
        ratings = [5, 4, 5]
        _analyze(ratings)
        assert ratings == [5, 4, 5]


class TestValidation:
    @pytest.mark.parametrize("bad", [0, 6, 3.5, True, "4"])
    def test_rejects_invalid_rating(self, bad: object) -> None:
        with pytest.raises(EndorsementValidationError, match="index 1"):
            _analyze([3, bad, 4])  # type: ignore[list-item]


class TestChronologicalOrder:
    def test_sorts_by_creation_time(self) -> None:
        endorsements = [
            Endorsement(id="b", text="", star_rating=5, created_at=_NOW),
            Endorsement(id="a", text="", star_rating=1, created_at=_NOW - timedelta(days=1)),
        ]
        assert ratings_in_chronological_order(endorsements) == [1, 5]

    def test_breaks_ties_by_id(self) -> None:
        endorsements = [
            Endorsement(id="2", text="", star_rating=4, created_at=_NOW),
            Endorsement(id="1", text="", star_rating=2, created_at=_NOW),
        ]
        assert ratings_in_chronological_order(endorsements) == [2, 4]

    def test_treats_naive_timestamps_as_utc(self) -> None:
        endorsements = [
            Endorsement(id="a", text="", star_rating=5, created_at=datetime(2024, 3, 2)),
            Endorsement(id="b", text="", star_rating=1, created_at=_NOW),
        ]
        assert ratings_in_chronological_order(endorsements) == [1, 5]

    def test_undated_first_and_unrated_skipped(self) -> None:
        endorsements = [
            Endorsement(id="a", text="", star_rating=3, created_at=_NOW),
            Endorsement(id="b", text="", star_rating=None, created_at=_NOW),
            Endorsement(id="c", text="", star_rating=2),
        ]
        assert ratings_in_chronological_order(endorsements) == [2, 3]

    def test_analyze_endorsements_uses_chronological_ratings(self) -> None:
        endorsements = [
            Endorsement(id=str(i), text="", star_rating=rating, created_at=_NOW + timedelta(hours=i))
            for i, rating in enumerate([5, 5, 5, 5, 5])
        ]
        profile = ConsistencyAnalyzer().analyze_endorsements(
            "reviewer-1", reversed(endorsements), analyzed_at=_NOW
        )
        assert profile.total_reviews == 5
        assert profile.consistency_score == 70
        assert profile.last_analyzed_at == _NOW
