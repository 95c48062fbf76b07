"""Tests for the command-line entry point."""
import io
import json
import os
import unittest
import tempfile
import shutil
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from ledgerflow.main import build_parser, main


@patch("ledgerflow.main.configure_logging")
class TestMain(unittest.TestCase):
    """Test CLI commands."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.env = patch.dict(os.environ, {"LEDGERFLOW_HOME": str(self.test_dir)})
        self.env.start()
        os.environ.pop("GEMINI_API_KEY", None)
        os.environ.pop("LEDGERFLOW_DB", None)

    def tearDown(self):
        """Clean up test fixtures."""
        self.env.stop()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _run(self, *argv):
        output = io.StringIO()
        with redirect_stdout(output):
            code = main(list(argv))
        return code, output.getvalue()

    def test_extract_csv(self, _configure_logging):
        path = self.test_dir / "statement.csv"
        path.write_text("Date,Description,Amount\n01/01/2024,Coffee Shop,150\n")

        code, output = self._run("extract", str(path))

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["data"], "Date: 01/01/2024, Description: Coffee Shop, Amount: 150")

    def test_extract_unsupported(self, _configure_logging):
        code, output = self._run("extract", str(self.test_dir / "notes.txt"))

        self.assertEqual(code, 1)
        self.assertEqual(json.loads(output)["error"], "unsupported_format")

    def test_process_needs_api_key(self, _configure_logging):
        """Processing refuses to start without a key."""
        path = self.test_dir / "statement.csv"
        path.write_text("Date,Description,Amount\n01/01/2024,Coffee Shop,150\n")

        code, output = self._run("process", str(path))

        self.assertEqual(code, 1)
        self.assertNotIn("transactions", output)

    def test_duplicates_empty(self, _configure_logging):
        code, output = self._run("duplicates", "--user-id", "99")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["message"], "No duplicate transactions found")


class TestParser(unittest.TestCase):
    """Test argument parsing."""

    def test_pages(self):
        args = build_parser().parse_args(["process", "statement.pdf", "--pages", "1,3"])

        self.assertEqual(args.pages, [1, 3])
        self.assertEqual(args.account_type, "bank_account")

    def test_bad_pages(self):
        with redirect_stdout(io.StringIO()), self.assertRaises(SystemExit):
            with patch("sys.stderr", io.StringIO()):
                build_parser().parse_args(["process", "statement.pdf", "--pages", "one"])


if __name__ == "__main__":
    unittest.main()
