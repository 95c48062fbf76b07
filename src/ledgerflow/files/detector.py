"""File-type detection and extractor dispatch."""
from pathlib import Path
from typing import Optional, Union

from ledgerflow.config.settings import get_settings
from ledgerflow.pdf.processor import PDFProcessor
from ledgerflow.utils.logger import get_logger
from ledgerflow.utils.exceptions import ErrorCode, ExtractionError
from .csv_extractor import CSVExtractor
from .excel_extractor import ExcelExtractor
from .models import ExtractionResult, PAGE_BREAK

logger = get_logger()

SUPPORTED_EXTENSIONS = frozenset({"pdf", "csv", "xls", "xlsx"})


def file_extension(filename: Union[str, Path]) -> str:
    """Lowercase extension without the dot ("" if there is none)."""
    return Path(str(filename)).suffix.lstrip(".").lower()


def is_supported(filename: Union[str, Path]) -> bool:
    """True for pdf, csv, xls and xlsx files."""
    return file_extension(filename) in SUPPORTED_EXTENSIONS


class FormatDetector:
    """Routes a statement file to the matching extractor."""

    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        csv_extractor: Optional[CSVExtractor] = None,
        excel_extractor: Optional[ExcelExtractor] = None
    ):
        settings = get_settings()
        self.pdf_processor = pdf_processor or PDFProcessor(max_pages=settings.max_pdf_pages)
        self.csv_extractor = csv_extractor or CSVExtractor(chunk_size=settings.csv_chunk_size)
        self.excel_extractor = excel_extractor or ExcelExtractor()

    def dispatch(self, file_path: Union[str, Path], password: Optional[str] = None) -> ExtractionResult:
        """
        Extract statement content from a file on disk.

        Never raises: every failure is reported through the result.

        Args:
            file_path: Local path to the uploaded file
            password: Optional PDF password

        Returns:
            ExtractionResult with ``data`` on success, ``error`` otherwise
        """
        file_path = Path(file_path)
        extension = file_extension(file_path)

        if extension not in SUPPORTED_EXTENSIONS:
            return ExtractionResult.failure(
                ErrorCode.UNSUPPORTED_FORMAT,
                f"Unsupported file type: .{extension}" if extension else "File has no extension"
            )

        try:
            if not file_path.exists():
                return ExtractionResult.failure(
                    ErrorCode.FILE_NOT_FOUND, f"File not found: {file_path}", file_type=extension
                )
            if file_path.stat().st_size == 0:
                return ExtractionResult.failure(
                    ErrorCode.EMPTY_FILE, f"{file_path.name} is empty", file_type=extension
                )

            logger.info(f"Extracting {extension} statement: {file_path.name}")

            if extension == "pdf":
                pages = self.pdf_processor.extract_pages(file_path, password)
                return ExtractionResult.ok(PAGE_BREAK.join(pages), extension, pages=pages)
            if extension == "csv":
                return ExtractionResult.ok(self.csv_extractor.extract(file_path), extension)
            return ExtractionResult.ok(self.excel_extractor.extract(file_path), extension)

        except ExtractionError as e:
            logger.warning(f"Extraction failed for {file_path.name}: [{e.code.value}] {e.message}")
            return ExtractionResult.failure(
                e.code,
                e.message,
                requires_password=e.code is ErrorCode.PASSWORD_REQUIRED,
                file_type=extension
            )
        except Exception as e:
            logger.error(f"Error extracting data from {file_path.name}: {e}")
            return ExtractionResult.failure(ErrorCode.FILE_READ_FAILED, str(e), file_type=extension)

    def is_password_protected(self, file_path: Union[str, Path]) -> bool:
        """Upfront protection probe; always False for non-PDF files."""
        if file_extension(file_path) != "pdf":
            return False
        return self.pdf_processor.password_guard.is_password_protected(Path(file_path))


_default_detector: Optional[FormatDetector] = None


def get_detector() -> FormatDetector:
    """Get or create the shared detector."""
    global _default_detector
    if _default_detector is None:
        _default_detector = FormatDetector()
    return _default_detector


def dispatch(file_path: Union[str, Path], password: Optional[str] = None) -> ExtractionResult:
    """Extract a statement file with the shared detector."""
    return get_detector().dispatch(file_path, password)
