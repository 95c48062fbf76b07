"""LLM processing module."""
from .models import CandidateTransaction, CategorizationResult
from .categorizer import StatementCategorizer, load_categories, select_pages, sort_by_date

__all__ = [
    "CandidateTransaction",
    "CategorizationResult",
    "StatementCategorizer",
    "load_categories",
    "select_pages",
    "sort_by_date"
]
