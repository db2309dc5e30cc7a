"""Services — QuoteService, NotificationService."""

from quote_automation.services.notification_service import NotificationService
from quote_automation.services.quote_service import QuoteService

__all__ = ["QuoteService", "NotificationService"]
