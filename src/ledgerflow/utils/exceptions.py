"""Error codes and exception classes for LedgerFlow."""
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Machine-readable codes reported in every tagged result."""

    # Input errors
    UNSUPPORTED_FORMAT = "unsupported_format"
    FILE_NOT_FOUND = "file_not_found"
    EMPTY_FILE = "empty_file"
    FILE_READ_FAILED = "file_read_failed"

    # PDF
    EMPTY_PDF = "empty_pdf"
    PASSWORD_REQUIRED = "password_required"
    PDF_PARSING_FAILED = "pdf_parsing_failed"

    # CSV
    EMPTY_CSV = "empty_csv"
    INVALID_CSV_FORMAT = "invalid_csv_format"
    CSV_PARSING_FAILED = "csv_parsing_failed"

    # Excel
    NO_SHEETS_FOUND = "no_sheets_found"
    EMPTY_EXCEL = "empty_excel"
    INVALID_EXCEL_FORMAT = "invalid_excel_format"
    EXCEL_PARSING_FAILED = "excel_parsing_failed"

    # External model
    MISSING_CREDENTIALS = "missing_credentials"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_JSON_RESPONSE = "invalid_json_response"
    PROCESSING_FAILED = "processing_failed"


class LedgerFlowError(Exception):
    """Base exception for LedgerFlow."""
    pass


class ConfigError(LedgerFlowError):
    """Configuration-related errors."""
    pass


class ExtractionError(LedgerFlowError):
    """Statement extraction errors carrying a reportable code."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or code.value
        super().__init__(self.message)


class PasswordRequiredError(ExtractionError):
    """PDF is encrypted and no (or a wrong) password was supplied."""

    def __init__(self, message: str = "This PDF is password protected. Please provide the password."):
        super().__init__(ErrorCode.PASSWORD_REQUIRED, message)


class LLMError(LedgerFlowError):
    """Language model call or response errors."""

    def __init__(self, code: ErrorCode, message: str, raw_response: Optional[str] = None):
        self.code = code
        self.message = message
        self.raw_response = raw_response
        super().__init__(message)


class ValidationError(LedgerFlowError):
    """Data validation errors."""
    pass


class DateParseError(ValidationError):
    """A date string could not be interpreted."""
    pass


class StorageError(LedgerFlowError):
    """Transaction store errors."""
    pass
