"""
Quote number generation.

Numbers look like ``IW-M2X7K9QZ-4TB``: a fixed prefix, the current
millisecond timestamp in base 36 and a short random suffix.  No lookup
against the store is made, so uniqueness is probabilistic.
"""

from __future__ import annotations

import secrets
import string
import time

QUOTE_NUMBER_PREFIX = "IW"
_BASE36 = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_quote_number(now_ms: int | None = None, suffix_length: int = 3) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(suffix_length))
    return f"{QUOTE_NUMBER_PREFIX}-{to_base36(now_ms)}-{suffix}"
