from collections.abc import Sequence
from typing import Any

import psycopg
from psycopg.rows import dict_row

from fairness.database.connection import get_connection
from fairness.database.exceptions import PersistenceError
from fairness.processor.models import Endorsement


class EndorsementRepository:
    """Database operations for the peer_endorsements table."""

    def list_by_reviewer(self, reviewer_id: str) -> list[Endorsement]:
        """Return a reviewer's active endorsements, oldest first.

        Equal creation times are ordered by id.
        """
        return self._fetch(
            """
            SELECT id, reviewer_id, subject_id, endorsement_text, star_rating, created_at
            FROM peer_endorsements
            WHERE reviewer_id = %s
              AND is_active
            ORDER BY created_at, id
            """,
            (reviewer_id,),
        )

    def find_by_ids(self, endorsement_ids: Sequence[str]) -> list[Endorsement]:
        """Return active endorsements in the order of *endorsement_ids*.

        Unknown or inactive ids are skipped.
        """
        ids = [str(endorsement_id) for endorsement_id in endorsement_ids]
        if not ids:
            return []
        rows = self._fetch(
            """
            SELECT id, reviewer_id, subject_id, endorsement_text, star_rating, created_at
            FROM peer_endorsements
            WHERE id::text = ANY(%s)
              AND is_active
            """,
            (ids,),
        )
        by_id = {endorsement.id: endorsement for endorsement in rows}
        ordered: list[Endorsement] = []
        for endorsement_id in dict.fromkeys(ids):
            endorsement = by_id.get(endorsement_id)
            if endorsement is not None:
                ordered.append(endorsement)
        return ordered

    def update_text(self, endorsement_id: str, text: str) -> None:
        """Overwrite the endorsement text with its processed version.

        Raises:
            PersistenceError: if the endorsement does not exist or the write fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE peer_endorsements
                        SET endorsement_text = %s, updated_at = NOW()
                        WHERE id::text = %s
                        """,
                        (text, str(endorsement_id)),
                    )
                    if cur.rowcount == 0:
                        raise PersistenceError(f"Endorsement {endorsement_id} not found")
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(
                f"Failed to update endorsement {endorsement_id}: {exc}"
            ) from exc

    def _fetch(self, sql: str, params: tuple[Any, ...]) -> list[Endorsement]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to read endorsements: {exc}") from exc
        return [_row_to_endorsement(row) for row in rows]


def _row_to_endorsement(row: dict[str, Any]) -> Endorsement:
    return Endorsement(
        id=str(row["id"]),
        reviewer_id=row["reviewer_id"],
        subject_id=row["subject_id"],
        text=row["endorsement_text"] or "",
        star_rating=row["star_rating"],
        created_at=row["created_at"],
    )
