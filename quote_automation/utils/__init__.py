from .logger import setup_logging
from .quote_number import generate_quote_number

__all__ = ["setup_logging", "generate_quote_number"]
