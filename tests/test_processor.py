"""Tests for the statement processing pipeline."""
import unittest
import tempfile
import shutil
from datetime import date
from pathlib import Path

from ledgerflow.config import Config
from ledgerflow.files.detector import FormatDetector
from ledgerflow.files.models import ExtractionResult
from ledgerflow.llm.categorizer import StatementCategorizer
from ledgerflow.orchestrator import StatementProcessor
from ledgerflow.storage import TransactionStore
from ledgerflow.utils.exceptions import ErrorCode
from tests.fakes import FakeClient, StubDetector, encrypt_pdf, make_pdf

CATEGORIES = ["Food & Dining", "Income", "Other"]

MODEL_REPLY = [
    {"date": "02/01/2024", "description": "Salary", "amount": 50000, "type": "credit", "category": "Income"},
    {"date": "01/01/2024", "description": "Coffee Shop", "amount": 150, "type": "expense", "category": "Food & Dining"},
]


class TestStatementProcessor(unittest.TestCase):
    """Test StatementProcessor functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.client = FakeClient.returning(MODEL_REPLY)
        self.store = TransactionStore(self.test_dir / "transactions.db")
        self.processor = StatementProcessor(
            config=Config(gemini_api_key="test_key", database_path=str(self.test_dir / "transactions.db")),
            detector=FormatDetector(),
            categorizer=StatementCategorizer(categories=CATEGORIES, client=self.client),
            store=self.store
        )

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _csv(self):
        path = self.test_dir / "statement.csv"
        path.write_text(
            "Date,Description,Amount\n"
            "01/01/2024,Coffee Shop,150\n"
            "02/01/2024,Salary,50000\n"
        )
        return path

    def test_process_csv(self):
        """CSV statements go straight to the model."""
        outcome = self.processor.process(self._csv())

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.file_type, "csv")
        self.assertEqual([t.description for t in outcome.transactions], ["Coffee Shop", "Salary"])
        self.assertEqual(outcome.total_tokens, 42)
        self.assertIn("Description: Coffee Shop", self.client.calls[0]["contents"])

        payload = outcome.to_dict()
        self.assertEqual(payload["totalTransactions"], 2)
        self.assertEqual(payload["transactions"][0]["normalizedDate"], "2024-01-01")

    def test_single_row_csv_with_bundled_categories(self):
        """One CSV row becomes one categorized transaction."""
        path = self.test_dir / "coffee.csv"
        path.write_text("Date,Description,Amount\n01/01/2024,Coffee Shop,150\n")
        client = FakeClient.returning([
            {"date": "01/01/2024", "description": "Coffee Shop", "amount": 150,
             "type": "expense", "category": "Outside Food"}
        ])
        processor = StatementProcessor(
            config=Config(gemini_api_key="test_key"),
            detector=FormatDetector(),
            categorizer=StatementCategorizer(client=client),
            store=self.store
        )

        outcome = processor.process(path)

        self.assertTrue(outcome.success)
        self.assertEqual(len(outcome.transactions), 1)
        txn = outcome.transactions[0]
        self.assertEqual(txn.category, "Outside Food")
        self.assertEqual(txn.normalized_date, date(2024, 1, 1))
        self.assertIn("Date: 01/01/2024, Description: Coffee Shop, Amount: 150", client.calls[0]["contents"])

    def test_multi_page_pdf_asks_for_pages(self):
        """Multi-page PDFs stop before the model call."""
        path = make_pdf(self.test_dir / "statement.pdf", ["Page one", "Page two", "Page three"])

        outcome = self.processor.process(path)

        self.assertFalse(outcome.success)
        self.assertTrue(outcome.requires_page_selection)
        self.assertEqual(outcome.total_pages, 3)
        self.assertEqual(self.client.calls, [])

    def test_selected_pages_processed(self):
        """Only the chosen pages are sent."""
        path = make_pdf(self.test_dir / "statement.pdf", ["Page one", "Page two", "Page three"])

        outcome = self.processor.process(path, selected_pages=[2])

        self.assertTrue(outcome.success)
        contents = self.client.calls[0]["contents"]
        self.assertIn("Page two", contents)
        self.assertNotIn("Page one", contents)

    def test_single_page_pdf(self):
        path = make_pdf(self.test_dir / "statement.pdf", ["01/01/2024 Coffee Shop 150"])

        outcome = self.processor.process(path)

        self.assertTrue(outcome.success)
        self.assertEqual(len(self.client.calls), 1)

    def test_password_prompt(self):
        """Locked PDFs ask for a password, wrong passwords report the error."""
        plain = make_pdf(self.test_dir / "plain.pdf", ["Statement"])
        locked = encrypt_pdf(plain, self.test_dir / "locked.pdf", "secret")

        outcome = self.processor.process(locked)
        self.assertTrue(outcome.requires_password)
        self.assertEqual(outcome.error, ErrorCode.PASSWORD_REQUIRED)
        self.assertIn("password protected", outcome.message)

        outcome = self.processor.process(locked, password="wrong")
        self.assertTrue(outcome.requires_password)
        self.assertIn("incorrect", outcome.message)

        self.assertTrue(self.processor.check_password(locked))
        self.assertFalse(self.processor.check_password(plain))

    def test_extraction_error_passed_through(self):
        path = self.test_dir / "notes.txt"
        path.write_text("hello")

        outcome = self.processor.process(path)

        self.assertEqual(outcome.error, ErrorCode.UNSUPPORTED_FORMAT)
        self.assertEqual(self.client.calls, [])

    def test_empty_extraction(self):
        """A successful extraction with no data is reported as empty."""
        processor = StatementProcessor(
            config=Config(gemini_api_key="test_key"),
            detector=StubDetector(ExtractionResult(data="", file_type="csv")),
            categorizer=StatementCategorizer(categories=CATEGORIES, client=self.client),
            store=self.store
        )

        outcome = processor.process(self.test_dir / "statement.csv")

        self.assertEqual(outcome.error, ErrorCode.EMPTY_FILE)

    def test_model_failure_reported(self):
        """Categorization errors reach the caller with the raw reply."""
        processor = StatementProcessor(
            config=Config(gemini_api_key="test_key"),
            detector=FormatDetector(),
            categorizer=StatementCategorizer(categories=CATEGORIES, client=FakeClient(text="not json")),
            store=self.store
        )

        outcome = processor.process(self._csv())

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.error, ErrorCode.INVALID_JSON_RESPONSE)
        self.assertEqual(outcome.to_dict()["rawResponse"], "not json")

    def test_save_then_find_duplicates(self):
        """Uploading the same statement twice yields duplicate groups."""
        outcome = self.processor.process(self._csv())

        self.processor.save(outcome.transactions, user_id=5, file_id=1)
        self.processor.save(outcome.transactions, user_id=5, file_id=2)
        report = self.processor.find_duplicates(5)

        self.assertEqual(len(self.store.list_for_user(5)), 4)
        self.assertEqual(report.total_duplicates, 2)
        self.assertEqual(self.processor.find_duplicates(6).total_duplicates, 0)


if __name__ == "__main__":
    unittest.main()
