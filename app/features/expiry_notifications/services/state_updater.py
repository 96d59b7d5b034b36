"""
Delivery state updater: persists the notified flag after a delivered group.
"""

import asyncio

from app.features.expiry_notifications.domain import NotificationGroup, PerishableRecord
from app.features.expiry_notifications.repository import ExpiryStore
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DeliveryStateUpdater:
    def __init__(self, store: ExpiryStore):
        self.store = store

    async def apply(self, group: NotificationGroup, overall_success: bool) -> int:
        """
        Flag every record of a delivered group; leave an undelivered group's
        flags untouched and hand its claims back.

        Returns:
            int: number of records flagged
        """
        if not overall_success:
            logger.info(
                "All channels failed, groceries stay eligible for the next run",
                user_id=group.user_id,
                record_count=len(group.records),
            )
            await self.release(group)
            return 0

        results = await asyncio.gather(*(self._flag(record) for record in group.records))
        return sum(1 for flagged in results if flagged)

    async def _flag(self, record: PerishableRecord) -> bool:
        try:
            updated = await self.store.set_notified(record.id)
        except Exception as e:
            logger.error(
                "Failed to mark grocery as notified",
                record_id=record.id,
                record_name=record.name,
                error=str(e),
            )
            return False

        if updated:
            logger.info("Marked notification as sent for grocery", record_id=record.id, record_name=record.name)
        else:
            logger.warning("Grocery disappeared before it could be flagged", record_id=record.id)
        return updated

    async def release(self, group: NotificationGroup) -> None:
        """Hand a group's claims back so the next run can retry it."""
        try:
            await self.store.release_claims(group.record_ids)
        except Exception as e:
            # The lease expires on its own
            logger.warning("Failed to release grocery claims", user_id=group.user_id, error=str(e))
