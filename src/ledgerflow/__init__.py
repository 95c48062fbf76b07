"""LedgerFlow: bank statement extraction, categorization and duplicate detection."""
from .api import (
    is_supported,
    extract,
    is_password_protected,
    categorize,
    parse_date,
    parse_date_strict,
    find_duplicates
)

__version__ = "0.1.0"

__all__ = [
    "is_supported",
    "extract",
    "is_password_protected",
    "categorize",
    "parse_date",
    "parse_date_strict",
    "find_duplicates",
    "__version__"
]
