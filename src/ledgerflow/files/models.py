"""Data models for statement extraction."""
from dataclasses import dataclass
from typing import List, Optional

from ledgerflow.utils.exceptions import ErrorCode

# Separates page texts inside a PDF extraction blob
PAGE_BREAK = "\n\n"


@dataclass
class ExtractionResult:
    """Tagged outcome of extracting one statement file."""
    data: Optional[str] = None
    error: Optional[ErrorCode] = None
    requires_password: bool = False
    message: Optional[str] = None
    file_type: Optional[str] = None
    pages: Optional[List[str]] = None  # PDFs only, one entry per page read

    @property
    def success(self) -> bool:
        return self.error is None and self.data is not None

    @classmethod
    def ok(cls, data: str, file_type: str, pages: Optional[List[str]] = None) -> "ExtractionResult":
        return cls(data=data, file_type=file_type, pages=pages)

    @classmethod
    def failure(
        cls,
        error: ErrorCode,
        message: Optional[str] = None,
        requires_password: bool = False,
        file_type: Optional[str] = None
    ) -> "ExtractionResult":
        return cls(
            error=error,
            message=message or error.value,
            requires_password=requires_password,
            file_type=file_type
        )

    def page_list(self) -> List[str]:
        """Pages of the extraction, splitting the blob when none were recorded."""
        if self.pages is not None:
            return list(self.pages)
        return self.data.split(PAGE_BREAK) if self.data else []

    def to_dict(self) -> dict:
        return {
            "data": self.data,
            "error": self.error.value if self.error else None,
            "requiresPassword": self.requires_password,
            "message": self.message,
        }
