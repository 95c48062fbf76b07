"""PDF text extraction."""
from pathlib import Path
from typing import List, Optional

import pdfplumber
import pypdf

from ledgerflow.files.models import PAGE_BREAK
from ledgerflow.utils.logger import get_logger
from ledgerflow.utils.exceptions import ErrorCode, ExtractionError, PasswordRequiredError
from .password_guard import PasswordGuard, PdfAccess, looks_like_password_error

logger = get_logger()


class PDFProcessor:
    """Extracts text from the leading pages of a PDF statement."""

    MAX_PAGES = 4

    def __init__(self, max_pages: int = MAX_PAGES, password_guard: Optional[PasswordGuard] = None):
        """
        Initialize PDF processor.

        Args:
            max_pages: Number of leading pages read; later pages are
                usually disclaimers
            password_guard: Encryption probe, created if omitted
        """
        self.max_pages = max_pages
        self.password_guard = password_guard or PasswordGuard()

    def extract_text(self, pdf_path: Path, password: Optional[str] = None) -> str:
        """Extract page texts joined by the page-break marker."""
        return PAGE_BREAK.join(self.extract_pages(pdf_path, password))

    def extract_pages(self, pdf_path: Path, password: Optional[str] = None) -> List[str]:
        """
        Extract text per page from PDF file.

        Args:
            pdf_path: Path to PDF file
            password: Optional password for encrypted files

        Returns:
            Text of each page read, at most ``max_pages`` entries

        Raises:
            PasswordRequiredError: Missing or wrong password
            ExtractionError: empty_pdf or pdf_parsing_failed
        """
        pdf_path = Path(pdf_path)
        self._check_access(pdf_path, password)

        pages = self._extract_with_pdfplumber(pdf_path, password)

        if pages is None or not self._has_text(pages):
            logger.info(f"pdfplumber found no text, trying pypdf for {pdf_path.name}")
            fallback = self._extract_with_pypdf(pdf_path, password)
            if fallback is not None:
                pages = fallback

        if pages is None:
            raise ExtractionError(ErrorCode.PDF_PARSING_FAILED, f"Could not parse {pdf_path.name}")

        if not self._has_text(pages):
            raise ExtractionError(
                ErrorCode.EMPTY_PDF,
                f"No text found in {pdf_path.name}. Scanned statements are not supported."
            )

        logger.info(
            f"Extracted {sum(len(p) for p in pages)} characters from "
            f"{len(pages)} pages of {pdf_path.name}"
        )
        return pages

    def _check_access(self, pdf_path: Path, password: Optional[str]) -> None:
        """Stop early with a password prompt instead of a failed parse."""
        try:
            access = self.password_guard.check_access(pdf_path, password)
        except Exception as e:
            if looks_like_password_error(e):
                raise PasswordRequiredError()
            # Let the extractors decide whether the file is readable
            logger.warning(f"Encryption probe failed for {pdf_path.name}: {e}")
            return

        if access is PdfAccess.PASSWORD_REQUIRED:
            raise PasswordRequiredError()
        if access is PdfAccess.INCORRECT_PASSWORD:
            raise PasswordRequiredError("The supplied PDF password is incorrect.")

    @staticmethod
    def _has_text(pages: List[str]) -> bool:
        return any(page.strip() for page in pages)

    def _extract_with_pdfplumber(self, pdf_path: Path, password: Optional[str]) -> Optional[List[str]]:
        """
        Extract text using pdfplumber.

        Returns:
            Page texts or None if parsing failed
        """
        try:
            leading_pages = list(range(1, self.max_pages + 1))
            with pdfplumber.open(pdf_path, password=password, pages=leading_pages) as pdf:
                logger.debug(f"pdfplumber: reading {len(pdf.pages)} of at most {self.max_pages} pages in {pdf_path.name}")
                pages = []
                for i, page in enumerate(pdf.pages, 1):
                    page_text = page.extract_text() or ""
                    logger.debug(f"pdfplumber: Page {i} extracted {len(page_text)} chars")
                    pages.append(page_text)
                return pages

        except Exception as e:
            if looks_like_password_error(e):
                raise PasswordRequiredError()
            logger.warning(f"pdfplumber extraction failed for {pdf_path.name}: {e}")
            return None

    def _extract_with_pypdf(self, pdf_path: Path, password: Optional[str]) -> Optional[List[str]]:
        """
        Extract text using pypdf (fallback).

        Returns:
            Page texts or None if parsing failed
        """
        try:
            with open(pdf_path, "rb") as f:
                reader = pypdf.PdfReader(f)
                if reader.is_encrypted:
                    reader.decrypt(password or "")

                pages = []
                for i, page in enumerate(reader.pages, 1):
                    if i > self.max_pages:
                        break
                    page_text = page.extract_text() or ""
                    logger.debug(f"pypdf: Page {i} extracted {len(page_text)} chars")
                    pages.append(page_text)
                return pages

        except Exception as e:
            if looks_like_password_error(e):
                raise PasswordRequiredError()
            logger.error(f"pypdf extraction failed for {pdf_path.name}: {e}")
            return None
