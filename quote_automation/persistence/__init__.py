"""Persistence — SheetsClient, InquiryRepository, ConfigRepository."""

from quote_automation.persistence.sheets_client import SheetsClient
from quote_automation.persistence.inquiry_repository import InquiryRepository
from quote_automation.persistence.config_repository import ConfigRepository

__all__ = ["SheetsClient", "InquiryRepository", "ConfigRepository"]
