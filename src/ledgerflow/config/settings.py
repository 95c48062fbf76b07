"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from dataclasses import dataclass

RESOURCES_DIR = Path(__file__).parent.parent / "resources"


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # Extraction
    max_pdf_pages: int
    csv_chunk_size: int

    # LLM
    llm_model_name: str
    llm_temperature: float

    # Duplicates
    duplicate_similarity_threshold: float
    duplicate_upload_window_seconds: int

    # Paths
    config_file: str
    log_file: str
    database_file: str

    @classmethod
    def load(cls, config_path: Path = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = RESOURCES_DIR / "config.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        return cls(
            app_name=config["app"]["name"],
            app_version=config["app"]["version"],
            log_level=config["logging"]["level"],
            log_max_file_size_mb=config["logging"]["max_file_size_mb"],
            log_backup_count=config["logging"]["backup_count"],
            max_pdf_pages=config["extraction"]["max_pdf_pages"],
            csv_chunk_size=config["extraction"]["csv_chunk_size"],
            llm_model_name=config["llm"]["model_name"],
            llm_temperature=config["llm"]["temperature"],
            duplicate_similarity_threshold=config["duplicates"]["similarity_threshold"],
            duplicate_upload_window_seconds=config["duplicates"]["upload_window_seconds"],
            config_file=config["paths"]["config_file"],
            log_file=config["paths"]["log_file"],
            database_file=config["paths"]["database_file"]
        )


# Global settings instance
_settings: AppSettings = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
