"""
Owner grouper: one notification group per user.
"""

from collections.abc import Iterable

from app.features.expiry_notifications.domain import ExpiryCandidate, NotificationGroup


def group_by_owner(candidates: Iterable[ExpiryCandidate]) -> list[NotificationGroup]:
    """
    Partition candidates by owner.

    Groups come out in order of each owner's first candidate, and records
    keep their encounter order inside a group.
    """
    groups: dict[str, NotificationGroup] = {}

    for candidate in candidates:
        owner_id = candidate.owner.id
        if owner_id not in groups:
            groups[owner_id] = NotificationGroup(user=candidate.owner)
        groups[owner_id].records.append(candidate.record)

    return list(groups.values())
