"""PDF processing module."""
from .processor import PDFProcessor
from .password_guard import PasswordGuard, PdfAccess, looks_like_password_error

__all__ = ["PDFProcessor", "PasswordGuard", "PdfAccess", "looks_like_password_error"]
