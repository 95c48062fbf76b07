"""Functional entry points used by the HTTP layer."""
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from ledgerflow.config.manager import ConfigManager
from ledgerflow.duplicates.finder import DuplicateFinder
from ledgerflow.duplicates.models import DuplicateReport
from ledgerflow.files.detector import dispatch, get_detector, is_supported
from ledgerflow.files.models import ExtractionResult
from ledgerflow.llm.categorizer import StatementCategorizer
from ledgerflow.llm.models import CategorizationResult
from ledgerflow.storage.models import PersistedTransaction
from ledgerflow.utils.dates import parse_date, parse_date_strict
from ledgerflow.utils.exceptions import ErrorCode

__all__ = [
    "is_supported",
    "extract",
    "is_password_protected",
    "categorize",
    "parse_date",
    "parse_date_strict",
    "find_duplicates",
]


def extract(file_path: Union[str, Path], password: Optional[str] = None) -> ExtractionResult:
    """Extract statement text from a pdf, csv, xls or xlsx file."""
    return dispatch(file_path, password)


def is_password_protected(file_path: Union[str, Path]) -> bool:
    """Upfront check so the caller can ask for a PDF password."""
    return get_detector().is_password_protected(file_path)


def categorize(
    text_or_pages: Union[str, Sequence[str]],
    selected_pages: Optional[Sequence[int]] = None,
    api_key: Optional[str] = None
) -> CategorizationResult:
    """Categorize statement text with the configured model."""
    if api_key is None:
        try:
            api_key = ConfigManager().load_config().gemini_api_key
        except Exception as e:
            return CategorizationResult.failure(ErrorCode.MISSING_CREDENTIALS, str(e))
    return StatementCategorizer(api_key=api_key).categorize(text_or_pages, selected_pages)


def find_duplicates(transactions: Iterable[PersistedTransaction], user_id: Optional[int] = None) -> DuplicateReport:
    """Group probable re-imports among already stored transactions."""
    return DuplicateFinder().find(transactions, user_id=user_id)
