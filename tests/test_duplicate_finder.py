"""Tests for duplicate transaction detection."""
import unittest
from datetime import date, datetime, timedelta

from ledgerflow.duplicates import DuplicateFinder
from ledgerflow.duplicates.finder import description_similarity
from ledgerflow.storage.models import PersistedTransaction

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


def _record(id_, description, amount=500.0, day=date(2024, 2, 10), type_="expense",
            user_id=1, created_offset=0, category="Food & Dining"):
    return PersistedTransaction(
        id=id_,
        user_id=user_id,
        date=day,
        description=description,
        amount=amount,
        type=type_,
        category=category,
        created_at=BASE_TIME + timedelta(seconds=created_offset)
    )


class TestDuplicateFinder(unittest.TestCase):
    """Test DuplicateFinder functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.finder = DuplicateFinder(similarity_threshold=0.8, upload_window_seconds=300)

    def test_case_only_difference(self):
        """Descriptions equal ignoring case are duplicates."""
        report = self.finder.find([
            _record(1, "SWIGGY ORDER", created_offset=0),
            _record(2, "swiggy order", created_offset=86400),
        ])

        self.assertEqual(report.total_duplicates, 1)
        self.assertEqual(report.groups[0].ids, [1, 2])
        self.assertEqual(report.message, "Found 1 potential duplicate groups")

    def test_similar_descriptions(self):
        """Near-identical descriptions are duplicates."""
        report = self.finder.find([
            _record(1, "AMAZON PAY INDIA PVT", created_offset=0),
            _record(2, "AMAZON PAY INDIA PVT LTD", created_offset=86400),
        ])

        self.assertEqual(report.total_duplicates, 1)

    def test_different_merchants_far_apart(self):
        """Unrelated descriptions created ten minutes apart are kept."""
        report = self.finder.find([
            _record(1, "Uber", created_offset=0),
            _record(2, "Zomato", created_offset=600),
        ])

        self.assertEqual(report.total_duplicates, 0)
        self.assertEqual(report.message, "No duplicate transactions found")

    def test_same_upload_window(self):
        """Rows created within the window are duplicates regardless of text."""
        report = self.finder.find([
            _record(1, "Uber", created_offset=0),
            _record(2, "Zomato", created_offset=60),
        ])

        self.assertEqual(report.total_duplicates, 1)
        self.assertEqual(report.groups[0].recency_gap_seconds, 60)

    def test_key_fields_must_match(self):
        """Date, amount and type must all be equal."""
        report = self.finder.find([
            _record(1, "Coffee"),
            _record(2, "Coffee", amount=501.0),
            _record(3, "Coffee", day=date(2024, 2, 11)),
            _record(4, "Coffee", type_="credit"),
        ])

        self.assertEqual(report.total_duplicates, 0)

    def test_greedy_pairs(self):
        """A third copy stays ungrouped once the first two pair up."""
        report = self.finder.find([
            _record(1, "Netflix", created_offset=0),
            _record(2, "Netflix", created_offset=3600),
            _record(3, "Netflix", created_offset=7200),
        ])

        self.assertEqual(report.total_duplicates, 1)
        self.assertEqual(report.groups[0].ids, [1, 2])

    def test_group_order(self):
        """Groups follow date then amount, newest and largest first."""
        report = self.finder.find([
            _record(1, "Rent", amount=100.0, day=date(2024, 1, 1)),
            _record(2, "Rent", amount=100.0, day=date(2024, 1, 1)),
            _record(3, "Gym", amount=50.0, day=date(2024, 2, 1)),
            _record(4, "Gym", amount=50.0, day=date(2024, 2, 1)),
            _record(5, "Book", amount=900.0, day=date(2024, 2, 1)),
            _record(6, "Book", amount=900.0, day=date(2024, 2, 1)),
        ])

        self.assertEqual([group.ids for group in report.groups], [[5, 6], [3, 4], [1, 2]])

    def test_members_ordered_by_creation(self):
        """The earliest copy comes first in a group."""
        report = self.finder.find([
            _record(7, "Coffee", created_offset=500),
            _record(9, "Coffee", created_offset=0),
        ])

        group = report.groups[0]
        self.assertEqual(group.ids, [9, 7])
        self.assertEqual(group.canonical.id, 9)

    def test_user_isolation(self):
        """Transactions of different users never match."""
        transactions = [
            _record(1, "Coffee", user_id=1),
            _record(2, "Coffee", user_id=2),
        ]

        self.assertEqual(self.finder.find(transactions).total_duplicates, 0)
        self.assertEqual(self.finder.find(transactions, user_id=1).total_duplicates, 0)

    def test_unsaved_records_skipped(self):
        """Records without an id are left out instead of failing the search."""
        transactions = [
            _record(None, "Coffee"),
            _record(None, "Coffee"),
            _record(1, "Netflix"),
            _record(2, "Netflix"),
        ]

        with self.assertLogs("ledgerflow", level="WARNING") as captured:
            report = self.finder.find(transactions)

        self.assertEqual([group.ids for group in report.groups], [[1, 2]])
        self.assertTrue(any("without an id" in line for line in captured.output))

    def test_repeatable(self):
        """Running twice gives the same groups."""
        transactions = [
            _record(3, "Netflix"),
            _record(1, "Netflix"),
            _record(2, "Uber", created_offset=10),
        ]

        first = self.finder.find(transactions).to_dict()
        second = self.finder.find(list(reversed(transactions))).to_dict()

        self.assertEqual(first, second)

    def test_to_dict(self):
        report = self.finder.find([_record(1, "Coffee"), _record(2, "coffee", created_offset=30)])

        payload = report.to_dict()

        self.assertEqual(payload["totalDuplicates"], 1)
        group = payload["duplicateGroups"][0]
        self.assertEqual(group["date"], "2024-02-10")
        self.assertEqual([member["id"] for member in group["transactions"]], [1, 2])


class TestSimilarity(unittest.TestCase):
    """Test description similarity."""

    def test_case_insensitive(self):
        self.assertEqual(description_similarity("Coffee", "COFFEE"), 1.0)

    def test_unrelated(self):
        self.assertLess(description_similarity("Uber", "Zomato"), 0.8)


if __name__ == "__main__":
    unittest.main()
