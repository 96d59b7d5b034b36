"""
Persistence layer for the expiry notification feature.

Reads expiring groceries with their owners and flips the notified flag.
Expected schema (owned by the CRUD service):

    users(id uuid PK, name text, email text NOT NULL, phone_number text NULL)
    groceries(
        id uuid PK,
        user_id uuid NULL,
        name text NOT NULL,
        expiry_date date NOT NULL,
        notification_sent boolean NOT NULL DEFAULT false,
        notification_claimed_until timestamptz NULL,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    )
"""

from datetime import date
from typing import Protocol

from app.db.helpers import execute_query, fetch_all, fetch_one
from app.features.expiry_notifications.domain import PerishableRecord, UserContact
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ExpiryStore(Protocol):
    """
    Store operations the expiry engine consumes.

    The scan resolves owners in the same query, so find_user_by_id is not on
    the run path; it is kept for callers outside a run that hold a grocery
    and need its owner's contact details.
    """

    async def find_expiring_unnotified(
        self, window_end: date
    ) -> list[tuple[PerishableRecord, UserContact | None]]: ...

    async def find_user_by_id(self, user_id: str) -> UserContact | None: ...

    async def set_notified(self, record_id: str) -> bool: ...

    async def claim_records(self, record_ids: list[str], lease_seconds: int) -> list[str]: ...

    async def release_claims(self, record_ids: list[str]) -> None: ...


class GroceryRepository:
    """PostgreSQL implementation of ExpiryStore."""

    @staticmethod
    def _row_to_record(row: dict) -> PerishableRecord:
        return PerishableRecord(
            id=str(row["id"]),
            name=row["name"],
            expiry_date=row["expiry_date"],
            owner_id=str(row["user_id"]) if row.get("user_id") else None,
            notification_sent=bool(row.get("notification_sent")),
        )

    @staticmethod
    def _row_to_owner(row: dict) -> UserContact | None:
        if not row.get("owner_id"):
            return None

        return UserContact(
            id=str(row["owner_id"]),
            name=row.get("owner_name") or "",
            email=row["owner_email"],
            phone_number=row.get("owner_phone_number") or None,
        )

    @classmethod
    async def find_expiring_unnotified(
        cls, window_end: date
    ) -> list[tuple[PerishableRecord, UserContact | None]]:
        """
        Return unnotified groceries expiring on or before window_end, each
        paired with its owner (None when the owner reference dangles).
        """

        query = """
            SELECT
                g.id, g.name, g.expiry_date, g.user_id, g.notification_sent,
                u.id AS owner_id,
                u.name AS owner_name,
                u.email AS owner_email,
                u.phone_number AS owner_phone_number
            FROM groceries g
            LEFT JOIN users u ON u.id = g.user_id
            WHERE g.expiry_date <= %s
              AND g.notification_sent IS NOT TRUE
              AND g.user_id IS NOT NULL
            ORDER BY g.expiry_date ASC, g.created_at ASC, g.id ASC
        """

        rows = await fetch_all(query, (window_end,))
        return [(cls._row_to_record(row), cls._row_to_owner(row)) for row in rows]

    @classmethod
    async def find_user_by_id(cls, user_id: str) -> UserContact | None:
        query = """
            SELECT id AS owner_id, name AS owner_name, email AS owner_email,
                   phone_number AS owner_phone_number
            FROM users
            WHERE id = %s
        """

        row = await fetch_one(query, (user_id,))
        return cls._row_to_owner(row) if row else None

    @classmethod
    async def set_notified(cls, record_id: str) -> bool:
        """Atomically set the notified flag on one grocery and drop its claim."""

        query = """
            UPDATE groceries
            SET notification_sent = true,
                notification_claimed_until = NULL,
                updated_at = NOW()
            WHERE id = %s
        """

        affected = await execute_query(query, (record_id,))
        logger.debug("Grocery marked as notified", record_id=record_id, affected=affected)
        return affected > 0

    @classmethod
    async def claim_records(cls, record_ids: list[str], lease_seconds: int) -> list[str]:
        """
        Lease unnotified groceries for this run.

        Only rows that are still unnotified and carry no live claim are
        taken, so two overlapping runs never both receive the same id.
        """
        if not record_ids:
            return []

        query = """
            UPDATE groceries
            SET notification_claimed_until = NOW() + make_interval(secs => %s)
            WHERE id = ANY(%s::uuid[])
              AND notification_sent IS NOT TRUE
              AND (notification_claimed_until IS NULL OR notification_claimed_until < NOW())
            RETURNING id
        """

        rows = await fetch_all(query, (lease_seconds, record_ids))
        claimed = [str(row["id"]) for row in rows]
        logger.debug("Groceries claimed", requested=len(record_ids), claimed=len(claimed))
        return claimed

    @classmethod
    async def release_claims(cls, record_ids: list[str]) -> None:
        """Drop claims so the groceries are eligible for the next run."""
        if not record_ids:
            return

        query = """
            UPDATE groceries
            SET notification_claimed_until = NULL
            WHERE id = ANY(%s::uuid[])
              AND notification_sent IS NOT TRUE
        """

        await execute_query(query, (record_ids,))


grocery_repository = GroceryRepository()
