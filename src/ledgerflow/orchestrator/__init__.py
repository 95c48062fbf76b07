"""Statement processing orchestration."""
from .processor import StatementProcessor, ProcessingOutcome

__all__ = ["StatementProcessor", "ProcessingOutcome"]
