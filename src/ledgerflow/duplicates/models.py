"""Data models for duplicate detection."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union


@dataclass
class DuplicateMember:
    """One transaction inside a duplicate group."""
    id: Union[int, str]
    description: str
    created_at: Optional[datetime]


@dataclass
class DuplicateGroup:
    """Transactions believed to be the same real-world event."""
    date: date
    amount: float
    type: str
    category: Optional[str]
    transactions: List[DuplicateMember]  # earliest created first
    recency_gap_seconds: Optional[float] = None

    @property
    def ids(self) -> List[Union[int, str]]:
        return [member.id for member in self.transactions]

    @property
    def canonical(self) -> DuplicateMember:
        """The earliest copy."""
        return self.transactions[0]

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
            "recencyGapSeconds": self.recency_gap_seconds,
            "transactions": [
                {
                    "id": member.id,
                    "description": member.description,
                    "createdAt": member.created_at.isoformat() if member.created_at else None,
                }
                for member in self.transactions
            ],
        }


@dataclass
class DuplicateReport:
    """Result of one duplicate search."""
    groups: List[DuplicateGroup] = field(default_factory=list)

    @property
    def total_duplicates(self) -> int:
        return len(self.groups)

    @property
    def message(self) -> str:
        if self.groups:
            return f"Found {len(self.groups)} potential duplicate groups"
        return "No duplicate transactions found"

    def to_dict(self) -> dict:
        return {
            "duplicateGroups": [group.to_dict() for group in self.groups],
            "totalDuplicates": self.total_duplicates,
            "message": self.message,
        }
