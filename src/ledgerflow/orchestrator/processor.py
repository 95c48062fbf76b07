"""Statement pipeline: extract -> select pages -> categorize -> normalize -> save.

One file is processed at a time and every stage runs sequentially. The model
call is the only slow step; it is made once per ``process`` call and is never
retried here.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ledgerflow.config.manager import Config, ConfigManager
from ledgerflow.duplicates.finder import DuplicateFinder
from ledgerflow.duplicates.models import DuplicateReport
from ledgerflow.files.detector import FormatDetector
from ledgerflow.llm.categorizer import StatementCategorizer
from ledgerflow.llm.models import CandidateTransaction
from ledgerflow.storage.models import PersistedTransaction, build_records
from ledgerflow.storage.store import TransactionStore
from ledgerflow.utils.logger import get_logger, set_user_context
from ledgerflow.utils.exceptions import ErrorCode

logger = get_logger()


@dataclass
class ProcessingOutcome:
    """What the caller needs to show after processing one upload."""
    success: bool = False
    transactions: List[CandidateTransaction] = field(default_factory=list)
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
    file_type: Optional[str] = None
    requires_password: bool = False
    requires_page_selection: bool = False
    pages: Optional[List[str]] = None
    total_tokens: Optional[int] = None
    raw_response: Optional[str] = None

    @property
    def total_pages(self) -> int:
        return len(self.pages) if self.pages else 0

    def to_dict(self) -> dict:
        payload = {
            "success": self.success,
            "message": self.message,
            "fileType": self.file_type,
        }
        if self.error:
            payload["error"] = self.error.value
        if self.requires_password:
            payload["requiresPassword"] = True
        if self.requires_page_selection:
            payload["requiresPageSelection"] = True
            payload["pages"] = self.pages
            payload["totalPages"] = self.total_pages
        if self.success:
            payload["transactions"] = [
                {**txn.model_dump(), "normalizedDate": txn.normalized_date.isoformat()}
                for txn in self.transactions
            ]
            payload["totalTransactions"] = len(self.transactions)
            payload["tokensUsed"] = self.total_tokens
        if self.raw_response is not None:
            payload["rawResponse"] = self.raw_response
        return payload


class StatementProcessor:
    """Orchestrates the flow: file -> text -> model -> reviewed records."""

    def __init__(
        self,
        config: Optional[Config] = None,
        detector: Optional[FormatDetector] = None,
        categorizer: Optional[StatementCategorizer] = None,
        store: Optional[TransactionStore] = None
    ):
        self.config = config or ConfigManager().load_config()
        self.detector = detector or FormatDetector()
        self.categorizer = categorizer or StatementCategorizer(api_key=self.config.gemini_api_key)
        self._store = store

    @property
    def store(self) -> TransactionStore:
        if self._store is None:
            db_path = Path(self.config.database_path) if self.config.database_path else None
            self._store = TransactionStore(db_path)
        return self._store

    def check_password(self, file_path: Union[str, Path]) -> bool:
        """True if the file is a PDF that needs a password before processing."""
        try:
            return self.detector.is_password_protected(file_path)
        except Exception as e:
            logger.error(f"Password check failed for {file_path}: {e}")
            return False

    def process(
        self,
        file_path: Union[str, Path],
        password: Optional[str] = None,
        selected_pages: Optional[Sequence[int]] = None
    ) -> ProcessingOutcome:
        """
        Run extraction and categorization for one uploaded file.

        Multi-page PDFs stop after extraction with ``requires_page_selection``
        until the caller passes ``selected_pages`` (1-based).

        Args:
            file_path: Local path of the uploaded statement
            password: Optional PDF password
            selected_pages: Pages to send to the model

        Returns:
            ProcessingOutcome, never raises
        """
        file_path = Path(file_path)
        logger.info(f"Processing file: {file_path.name}")

        try:
            extraction = self.detector.dispatch(file_path, password)

            if extraction.error:
                if extraction.requires_password and not password:
                    return ProcessingOutcome(
                        error=extraction.error,
                        requires_password=True,
                        file_type=extraction.file_type,
                        message="This PDF is password protected. Please provide the password."
                    )
                return ProcessingOutcome(
                    error=extraction.error,
                    message=extraction.message,
                    requires_password=extraction.requires_password,
                    file_type=extraction.file_type
                )

            if not extraction.data:
                return ProcessingOutcome(
                    error=ErrorCode.EMPTY_FILE,
                    message="Could not extract any data from the file",
                    file_type=extraction.file_type
                )

            statement = extraction.data
            if extraction.file_type == "pdf":
                pages = extraction.page_list()
                if not selected_pages and len(pages) > 1:
                    return ProcessingOutcome(
                        requires_page_selection=True,
                        pages=pages,
                        file_type="pdf",
                        message="Please select which pages to process"
                    )
                statement = pages

            logger.info("Categorizing transactions...")
            result = self.categorizer.categorize(statement, selected_pages)

            if not result.success:
                return ProcessingOutcome(
                    error=result.error,
                    message=result.message,
                    raw_response=result.raw_response,
                    file_type=extraction.file_type
                )

            logger.info(f"Successfully processed {len(result.transactions)} transactions from {file_path.name}")
            return ProcessingOutcome(
                success=True,
                transactions=result.transactions,
                total_tokens=result.total_tokens,
                file_type=extraction.file_type,
                message="File processed successfully. Please review the transactions."
            )

        except Exception as e:
            logger.error(f"Processing failed for {file_path.name}: {e}")
            return ProcessingOutcome(error=ErrorCode.PROCESSING_FAILED, message=str(e))

    def save(
        self,
        transactions: Sequence[CandidateTransaction],
        user_id: int,
        account_type: str = "bank_account",
        file_id: Optional[Union[int, str]] = None
    ) -> List[PersistedTransaction]:
        """Commit reviewed transactions for one user and upload."""
        set_user_context(user_id)
        try:
            records = build_records(transactions, user_id, account_type, file_id)
            logger.info(f"Saving {len(records)} transactions")
            return self.store.insert_many(records)
        finally:
            set_user_context(None)

    def find_duplicates(self, user_id: int) -> DuplicateReport:
        """Search the user's stored transactions for probable re-imports."""
        set_user_context(user_id)
        try:
            return DuplicateFinder(self.store).find_for_user(user_id)
        finally:
            set_user_context(None)
