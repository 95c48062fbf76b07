"""Logging infrastructure with user context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


def get_home_dir() -> Path:
    """Directory holding logs, config.json and the default database."""
    return Path(os.getenv("LEDGERFLOW_HOME", str(Path.home() / ".ledgerflow")))


class UserContextFilter(logging.Filter):
    """Add user context to log records."""

    def __init__(self):
        super().__init__()
        self.user_id: Optional[str] = None

    def filter(self, record):
        """Add user_id to record."""
        record.user_id = self.user_id or "system"
        return True


class LedgerFlowLogger:
    """Centralized logging manager."""

    def __init__(
        self,
        log_level: str = "INFO",
        max_file_size_mb: int = 10,
        backup_count: int = 30,
        log_file_name: str = "service.log"
    ):
        self.log_dir = get_home_dir() / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / log_file_name
        self.user_filter = UserContextFilter()

        self.logger = logging.getLogger("ledgerflow")
        self.logger.setLevel(getattr(logging, log_level.upper()))

        # Remove existing handlers
        self.logger.handlers.clear()

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [user:%(user_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        file_handler.addFilter(self.user_filter)
        console_handler.addFilter(self.user_filter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def set_user_context(self, user_id: Optional[str]):
        """Set current user context for logging."""
        self.user_filter.user_id = user_id

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[LedgerFlowLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = LedgerFlowLogger(log_level)
    return _logger_instance.get_logger()


def configure_logging(
    log_level: str = "INFO",
    max_file_size_mb: int = 10,
    backup_count: int = 30,
    log_file_name: str = "service.log"
) -> logging.Logger:
    """(Re)build the global logger from settings."""
    global _logger_instance
    _logger_instance = LedgerFlowLogger(log_level, max_file_size_mb, backup_count, log_file_name)
    return _logger_instance.get_logger()


def set_user_context(user_id: Optional[str]):
    """Set user context for logging."""
    if _logger_instance:
        _logger_instance.set_user_context(str(user_id) if user_id is not None else None)
