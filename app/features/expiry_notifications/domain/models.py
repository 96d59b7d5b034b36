"""
Domain models for the expiry notification feature.

Records and contacts mirror rows of the grocery/user store; groups,
dispatch results and run summaries only live for the duration of one run.
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass(slots=True, frozen=True)
class UserContact:
    """Owner of perishable records and recipient of expiry alerts."""

    id: str
    name: str
    email: str
    phone_number: str | None = None

    @property
    def has_phone(self) -> bool:
        return bool(self.phone_number and self.phone_number.strip())


@dataclass(slots=True, frozen=True)
class PerishableRecord:
    """A grocery item with an expiry date."""

    id: str
    name: str
    expiry_date: date
    owner_id: str | None
    notification_sent: bool = False


@dataclass(slots=True, frozen=True)
class ExpiryCandidate:
    """A record selected by the scan, paired with its resolved owner."""

    record: PerishableRecord
    owner: UserContact


@dataclass(slots=True)
class NotificationGroup:
    """One owner's qualifying records for the current run, in encounter order."""

    user: UserContact
    records: list[PerishableRecord] = field(default_factory=list)

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def record_ids(self) -> list[str]:
        return [record.id for record in self.records]

    @property
    def earliest_expiry(self) -> date:
        return min(record.expiry_date for record in self.records)


@dataclass(slots=True)
class DispatchResult:
    """
    Per-channel outcome of one group's dispatch.

    None marks a channel that was skipped (no phone on file); it never
    counts as a success.
    """

    user_id: str
    email: bool
    chat: bool | None
    text: bool | None

    @property
    def overall_success(self) -> bool:
        return bool(self.email or self.chat or self.text)


@dataclass(slots=True)
class RunSummary:
    """Outcome of one run_expiry_check invocation."""

    success: bool
    message: str
    candidates_found: int = 0
    users_notified: int = 0
    groups: int = 0
    records_flagged: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "message": self.message,
            "candidates_found": self.candidates_found,
            "users_notified": self.users_notified,
            "groups": self.groups,
            "records_flagged": self.records_flagged,
        }
        if self.error:
            data["error"] = self.error
        return data
