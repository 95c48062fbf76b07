"""Keep logs, config and databases of the test run out of the real home."""
import os
import tempfile

os.environ.setdefault("LEDGERFLOW_HOME", tempfile.mkdtemp(prefix="ledgerflow-tests-"))
os.environ.pop("GEMINI_API_KEY", None)
