from enum import Enum

class ContactMethod(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PHONE = "phone"

class UIUXStyle(str, Enum):
    NORMAL = "normal"
    FANCY = "fancy"

class InquiryStatus(str, Enum):
    PENDING = "pending"
    QUOTE_SENT = "quote_sent"
    CONVERTED = "converted"
    REJECTED = "rejected"

class OptionStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"

class DomainType(str, Enum):
    NEW = "new"
    TRANSFER = "transfer"


# Allowed forward moves through the inquiry lifecycle
STATUS_TRANSITIONS: dict[InquiryStatus, frozenset[InquiryStatus]] = {
    InquiryStatus.PENDING: frozenset({InquiryStatus.QUOTE_SENT, InquiryStatus.REJECTED}),
    InquiryStatus.QUOTE_SENT: frozenset({InquiryStatus.CONVERTED, InquiryStatus.REJECTED}),
    InquiryStatus.CONVERTED: frozenset(),
    InquiryStatus.REJECTED: frozenset(),
}
