"""PDF encryption probing."""
from enum import Enum
from pathlib import Path
from typing import Optional

import pdfplumber
import pypdf
from pypdf import PasswordType
from pypdf.errors import FileNotDecryptedError
from pdfminer.pdfdocument import PDFEncryptionError

from ledgerflow.utils.logger import get_logger

logger = get_logger()

PASSWORD_HINTS = ("password", "encrypted", "decrypt")


class PdfAccess(Enum):
    """How a PDF can be opened with the credentials at hand."""
    OPEN = "open"
    UNLOCKED = "unlocked"
    PASSWORD_REQUIRED = "password_required"
    INCORRECT_PASSWORD = "incorrect_password"

    @property
    def readable(self) -> bool:
        return self in (PdfAccess.OPEN, PdfAccess.UNLOCKED)


def looks_like_password_error(exc: BaseException) -> bool:
    """
    Decide whether a parser exception was caused by encryption.

    pdfplumber wraps pdfminer errors, so the wrapped exception, the cause
    chain and the message text are all inspected.
    """
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, (FileNotDecryptedError, PDFEncryptionError)):
            return True
        if isinstance(current, BaseException):
            message = str(current).lower()
            if any(hint in message for hint in PASSWORD_HINTS):
                return True
            pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
            pending.extend([current.__cause__, current.__context__])
    return False


class PasswordGuard:
    """Classifies PDF protection before and during extraction."""

    def check_access(self, pdf_path: Path, password: Optional[str] = None) -> PdfAccess:
        """
        Classify whether the PDF can be read.

        Args:
            pdf_path: Path to PDF file
            password: Password supplied by the user, if any

        Returns:
            PdfAccess value
        """
        reader = pypdf.PdfReader(pdf_path)
        if not reader.is_encrypted:
            return PdfAccess.OPEN

        # Owner-password-only files open with an empty user password
        if reader.decrypt("") != PasswordType.NOT_DECRYPTED:
            return PdfAccess.OPEN

        if not password:
            logger.info(f"{Path(pdf_path).name} is password protected")
            return PdfAccess.PASSWORD_REQUIRED

        if pypdf.PdfReader(pdf_path).decrypt(password) == PasswordType.NOT_DECRYPTED:
            logger.warning(f"Incorrect password supplied for {Path(pdf_path).name}")
            return PdfAccess.INCORRECT_PASSWORD

        return PdfAccess.UNLOCKED

    def is_password_protected(self, pdf_path: Path) -> bool:
        """Probe a PDF with a one-page parse; True if a password is needed."""
        try:
            if self.check_access(pdf_path) is PdfAccess.PASSWORD_REQUIRED:
                return True

            with pdfplumber.open(pdf_path, pages=[1]) as pdf:
                for page in pdf.pages:
                    page.extract_text()
            return False

        except Exception as e:
            protected = looks_like_password_error(e)
            logger.debug(f"Protection probe failed for {Path(pdf_path).name} (protected={protected}): {e}")
            return protected
