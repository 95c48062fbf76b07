"""Utility modules."""
from .logger import get_logger, configure_logging, set_user_context
from .exceptions import (
    ErrorCode,
    LedgerFlowError,
    ConfigError,
    ExtractionError,
    PasswordRequiredError,
    LLMError,
    ValidationError,
    DateParseError,
    StorageError
)
from .dates import EPOCH, parse_date, parse_date_strict, is_sentinel

__all__ = [
    "get_logger",
    "configure_logging",
    "set_user_context",
    "ErrorCode",
    "LedgerFlowError",
    "ConfigError",
    "ExtractionError",
    "PasswordRequiredError",
    "LLMError",
    "ValidationError",
    "DateParseError",
    "StorageError",
    "EPOCH",
    "parse_date",
    "parse_date_strict",
    "is_sentinel"
]
