"""
Expiry notification feature package.

Daily scan of the grocery store for perishables that are expired or about
to expire, with one combined notice per owner over email, WhatsApp and
SMS. Domain models, repository, services, jobs and the HTTP trigger all
live in this slice.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as expiry_router  # noqa: F401
from .domain.models import (  # noqa: F401
    DispatchResult,
    NotificationGroup,
    PerishableRecord,
    RunSummary,
    UserContact,
)
from .jobs.expiry_check_job import start_expiry_check_scheduler  # noqa: F401
from .services.notification_service import (  # noqa: F401
    ExpiryNotificationService,
    expiry_notification_service,
)
from .services.trigger import notify_grocery_created, schedule_expiry_check  # noqa: F401
