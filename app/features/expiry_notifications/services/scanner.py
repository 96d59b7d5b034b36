"""
Candidate scanner: selects groceries that are expired or expire within the
notification horizon and have not been notified yet.
"""

from datetime import datetime

from app.features.expiry_notifications.domain import ExpiryCandidate, ExpiryNotificationConfig
from app.features.expiry_notifications.repository import ExpiryStore
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class CandidateScanner:
    """
    Reads candidates from the store.

    Records whose owner does not resolve are logged and dropped. When a
    claim lease is configured, only the records this run managed to claim
    are returned; the rest belong to an overlapping run.
    """

    def __init__(self, store: ExpiryStore, config: ExpiryNotificationConfig):
        self.store = store
        self.config = config

    async def scan(self, now: datetime | None = None) -> list[ExpiryCandidate]:
        """
        Raises:
            Whatever the store raises; a scan failure fails the run.
        """
        window_end = self.config.window_end(now)

        logger.info(
            "Checking for groceries expiring on or before window end",
            today=self.config.today(now).isoformat(),
            window_end=window_end.isoformat(),
            horizon_days=self.config.horizon_days,
        )

        rows = await self.store.find_expiring_unnotified(window_end)

        candidates = []
        for record, owner in rows:
            if owner is None:
                logger.info(
                    "Grocery has no resolvable owner, skipping notification",
                    record_id=record.id,
                    record_name=record.name,
                    owner_id=record.owner_id,
                )
                continue
            candidates.append(ExpiryCandidate(record=record, owner=owner))

        logger.info(
            "Expiring groceries found",
            found=len(rows),
            with_valid_owner=len(candidates),
        )

        if not candidates or self.config.claim_lease_seconds <= 0:
            return candidates

        claimed_ids = set(
            await self.store.claim_records(
                [c.record.id for c in candidates], self.config.claim_lease_seconds
            )
        )
        claimed = [c for c in candidates if c.record.id in claimed_ids]

        if len(claimed) < len(candidates):
            logger.info(
                "Some groceries are claimed by an overlapping run",
                skipped=len(candidates) - len(claimed),
            )

        return claimed
