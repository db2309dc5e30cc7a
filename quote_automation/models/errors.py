"""
Exception types raised by the quote pipeline.
Routes translate these into HTTP responses.
"""

from __future__ import annotations


class QuoteAutomationError(Exception):
    """Base class for all quote pipeline errors."""


class SubmissionValidationError(QuoteAutomationError):
    """The inbound payload violated one or more field rules."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class StoreNotConfiguredError(QuoteAutomationError):
    """Spreadsheet credentials are missing from the environment."""


class PersistenceError(QuoteAutomationError):
    """Appending or updating a row in the spreadsheet store failed."""


class NotificationError(QuoteAutomationError):
    """A notification could not be sent."""


class InvalidStatusTransition(QuoteAutomationError):
    """Requested status change is not a forward step of the lifecycle."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move inquiry from '{current}' to '{requested}'")
