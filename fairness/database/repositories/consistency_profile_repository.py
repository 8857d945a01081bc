from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from fairness.consistency.models import ConsistencyProfile
from fairness.database.connection import get_connection
from fairness.database.exceptions import PersistenceError

_COLUMNS = """
    reviewer_id, total_reviews, average_rating, standard_deviation,
    consistency_score, is_consistent, issues_detected, last_analyzed_at
"""


class ConsistencyProfileRepository:
    """Database operations for the reviewer_consistency_profiles table.

    Profiles are keyed by reviewer. Concurrent upserts for the same
    reviewer are not coordinated: the last write wins.
    """

    def upsert(self, profile: ConsistencyProfile) -> None:
        """Insert or replace the profile for ``profile.reviewer_id``.

        Raises:
            PersistenceError: if the profile cannot be written.
        """
        try:
            with get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO reviewer_consistency_profiles ({_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (reviewer_id) DO UPDATE
                    SET total_reviews = EXCLUDED.total_reviews,
                        average_rating = EXCLUDED.average_rating,
                        standard_deviation = EXCLUDED.standard_deviation,
                        consistency_score = EXCLUDED.consistency_score,
                        is_consistent = EXCLUDED.is_consistent,
                        issues_detected = EXCLUDED.issues_detected,
                        last_analyzed_at = EXCLUDED.last_analyzed_at,
                        updated_at = NOW()
                    """,
                    (
                        profile.reviewer_id,
                        profile.total_reviews,
                        profile.average_rating,
                        profile.standard_deviation,
                        profile.consistency_score,
                        profile.is_consistent,
                        Jsonb(list(profile.issues)),
                        profile.last_analyzed_at,
                    ),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(
                f"Failed to upsert consistency profile for {profile.reviewer_id}: {exc}"
            ) from exc

    def find_by_reviewer(self, reviewer_id: str) -> ConsistencyProfile | None:
        rows = self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM reviewer_consistency_profiles
            WHERE reviewer_id = %s
            """,
            (reviewer_id,),
        )
        return rows[0] if rows else None

    def list_profiles(self, min_reviews: int = 0) -> list[ConsistencyProfile]:
        """Return profiles with at least *min_reviews* reviews, least consistent first."""
        return self._fetch(
            f"""
            SELECT {_COLUMNS}
            FROM reviewer_consistency_profiles
            WHERE total_reviews >= %s
            ORDER BY consistency_score ASC NULLS LAST, reviewer_id
            """,
            (min_reviews,),
        )

    def _fetch(self, sql: str, params: tuple[Any, ...]) -> list[ConsistencyProfile]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to read consistency profiles: {exc}") from exc
        return [_row_to_profile(row) for row in rows]


def _row_to_profile(row: dict[str, Any]) -> ConsistencyProfile:
    average = row["average_rating"]
    stddev = row["standard_deviation"]
    return ConsistencyProfile(
        reviewer_id=row["reviewer_id"],
        total_reviews=row["total_reviews"],
        average_rating=float(average) if average is not None else 0.0,
        standard_deviation=float(stddev) if stddev is not None else 0.0,
        consistency_score=row["consistency_score"],
        is_consistent=row["is_consistent"],
        issues=list(row["issues_detected"] or []),
        last_analyzed_at=row["last_analyzed_at"],
    )
