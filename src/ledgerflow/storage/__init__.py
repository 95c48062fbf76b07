"""Transaction persistence module."""
from .models import PersistedTransaction, build_records, ACCOUNT_TYPES
from .store import TransactionStore

__all__ = ["PersistedTransaction", "build_records", "ACCOUNT_TYPES", "TransactionStore"]
