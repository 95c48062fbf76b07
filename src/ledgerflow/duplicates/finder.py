"""Duplicate transaction detection.

Two transactions of the same user are a candidate pair when date, amount and
type match exactly. A candidate pair is a duplicate when any of these hold:

* descriptions are equal ignoring case,
* description similarity is above the threshold (0.8),
* the rows were created less than the upload window (300 s) apart.

Pairs become groups greedily: pairs are visited by date and amount
descending, then by ids, and a pair is dropped as soon as either id already
sits in a group. Groups therefore never have more than two members and a
third copy of the same event can stay ungrouped.
"""
from collections import defaultdict
from datetime import datetime
from itertools import combinations
from typing import Iterable, List, Optional, Tuple

import Levenshtein

from ledgerflow.config.settings import get_settings
from ledgerflow.storage.models import PersistedTransaction
from ledgerflow.utils.logger import get_logger
from .models import DuplicateGroup, DuplicateMember, DuplicateReport

logger = get_logger()

Pair = Tuple[PersistedTransaction, PersistedTransaction]


def description_similarity(first: str, second: str) -> float:
    """Case-insensitive normalized edit similarity in [0, 1]."""
    return Levenshtein.ratio((first or "").strip().lower(), (second or "").strip().lower())


class DuplicateFinder:
    """Finds probable re-imports among a user's stored transactions."""

    def __init__(
        self,
        store=None,
        similarity_threshold: Optional[float] = None,
        upload_window_seconds: Optional[int] = None
    ):
        """
        Initialize duplicate finder.

        Args:
            store: Object exposing ``list_for_user(user_id)``; only needed
                for ``find_for_user``
            similarity_threshold: Minimum (exclusive) description similarity
            upload_window_seconds: Maximum (exclusive) creation-time gap
        """
        settings = get_settings()
        self.store = store
        self.similarity_threshold = (
            settings.duplicate_similarity_threshold if similarity_threshold is None else similarity_threshold
        )
        self.upload_window_seconds = (
            settings.duplicate_upload_window_seconds if upload_window_seconds is None else upload_window_seconds
        )

    def find_for_user(self, user_id: int) -> DuplicateReport:
        """Load the user's full history from the store and search it."""
        if self.store is None:
            raise ValueError("DuplicateFinder needs a store to look up transactions")
        return self.find(self.store.list_for_user(user_id), user_id=user_id)

    def find(self, transactions: Iterable[PersistedTransaction], user_id: Optional[int] = None) -> DuplicateReport:
        """
        Group duplicate transactions.

        Args:
            transactions: Stored transactions, any order
            user_id: Restrict the search to one user

        Returns:
            DuplicateReport with one group per accepted pair
        """
        transactions = [txn for txn in transactions if user_id is None or txn.user_id == user_id]

        # Pairs are ordered by id, so only stored rows can take part
        unsaved = [txn for txn in transactions if txn.id is None]
        if unsaved:
            logger.warning(f"Skipping {len(unsaved)} transactions without an id; save them before searching")
            transactions = [txn for txn in transactions if txn.id is not None]

        groups = []
        grouped_ids = set()

        for first, second in self.duplicate_pairs(transactions):
            if first.id in grouped_ids or second.id in grouped_ids:
                continue
            groups.append(self._build_group(first, second))
            grouped_ids.update((first.id, second.id))

        logger.info(f"Duplicate search found {len(groups)} groups")
        return DuplicateReport(groups=groups)

    def duplicate_pairs(self, transactions: Iterable[PersistedTransaction]) -> List[Pair]:
        """Flagged pairs in visiting order, first id lower than second."""
        buckets = defaultdict(list)
        for txn in transactions:
            buckets[(txn.user_id, txn.date, txn.amount, txn.type)].append(txn)

        pairs = []
        for bucket in buckets.values():
            bucket.sort(key=lambda txn: txn.id)
            for first, second in combinations(bucket, 2):
                if first.id < second.id and self.is_duplicate(first, second):
                    pairs.append((first, second))

        pairs.sort(key=lambda pair: (-pair[0].date.toordinal(), -pair[0].amount, pair[0].id, pair[1].id))
        return pairs

    def is_duplicate(self, first: PersistedTransaction, second: PersistedTransaction) -> bool:
        """Apply the description and upload-time tests to a candidate pair."""
        if (first.description or "").lower() == (second.description or "").lower():
            return True

        if description_similarity(first.description, second.description) > self.similarity_threshold:
            return True

        gap = self._creation_gap(first, second)
        return gap is not None and gap < self.upload_window_seconds

    @staticmethod
    def _creation_gap(first: PersistedTransaction, second: PersistedTransaction) -> Optional[float]:
        if first.created_at is None or second.created_at is None:
            return None
        return abs((first.created_at - second.created_at).total_seconds())

    def _build_group(self, first: PersistedTransaction, second: PersistedTransaction) -> DuplicateGroup:
        members = sorted(
            (
                DuplicateMember(id=txn.id, description=txn.description, created_at=txn.created_at)
                for txn in (first, second)
            ),
            key=lambda member: member.created_at or datetime.min
        )
        return DuplicateGroup(
            date=first.date,
            amount=first.amount,
            type=first.type,
            category=first.category,
            transactions=members,
            recency_gap_seconds=self._creation_gap(first, second)
        )
