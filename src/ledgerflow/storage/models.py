"""Stored transaction records."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from ledgerflow.llm.models import CandidateTransaction
from ledgerflow.utils.dates import parse_date

ACCOUNT_TYPES = ("bank_account", "credit_card")


@dataclass
class PersistedTransaction:
    """A categorized transaction as committed to the store."""
    user_id: int
    date: date
    description: str
    amount: float
    type: str  # credit or expense
    account_type: str = "bank_account"
    category: Optional[str] = "Other"
    time: Optional[str] = None
    user: Optional[str] = None  # cardholder name on joint accounts
    bank: Optional[str] = None
    account_id: Optional[str] = None
    original_description: Optional[str] = None
    file_source: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateTransaction,
        user_id: int,
        account_type: str = "bank_account",
        file_id: Optional[Union[int, str]] = None
    ) -> "PersistedTransaction":
        """Build the record committed for a reviewed candidate transaction."""
        if account_type not in ACCOUNT_TYPES:
            raise ValueError(f"account_type must be one of {ACCOUNT_TYPES}, got {account_type!r}")

        return cls(
            user_id=user_id,
            date=parse_date(candidate.date),
            time=candidate.time or None,
            user=candidate.user or None,
            description=candidate.description,
            bank=candidate.bank or None,
            account_id=str(candidate.account_id) if candidate.account_id not in (None, "") else None,
            original_description=candidate.original_description or candidate.description,
            amount=candidate.amount_value(),
            type=candidate.type,
            account_type=account_type,
            category=candidate.category or "Other",
            file_source=f"file_{file_id}" if file_id else None
        )


def build_records(
    candidates: Iterable[CandidateTransaction],
    user_id: int,
    account_type: str = "bank_account",
    file_id: Optional[Union[int, str]] = None
) -> List[PersistedTransaction]:
    """Convert reviewed candidates into records for one upload."""
    return [
        PersistedTransaction.from_candidate(candidate, user_id, account_type, file_id)
        for candidate in candidates
    ]
