"""Command-line entry point."""
import argparse
import json
import sys
from typing import List, Optional

from ledgerflow.config.manager import ConfigManager
from ledgerflow.config.settings import get_settings
from ledgerflow.orchestrator.processor import StatementProcessor
from ledgerflow.storage.models import ACCOUNT_TYPES
from ledgerflow.utils.logger import configure_logging, get_logger

logger = get_logger()


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _parse_pages(value: Optional[str]) -> Optional[List[int]]:
    """Parse "1,3" into [1, 3]."""
    if not value:
        return None
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Pages must be comma-separated numbers, got {value!r}")


def check_password_command(processor: StatementProcessor, args) -> int:
    """Report whether a PDF needs a password."""
    _print_json({"requiresPassword": processor.check_password(args.file)})
    return 0


def extract_command(processor: StatementProcessor, args) -> int:
    """Print the extracted statement text."""
    result = processor.detector.dispatch(args.file, args.password)
    _print_json(result.to_dict())
    return 0 if result.success else 1


def process_command(processor: StatementProcessor, args) -> int:
    """Extract and categorize a statement, optionally saving the result."""
    outcome = processor.process(args.file, args.password, args.pages)
    payload = outcome.to_dict()

    if outcome.success and args.save:
        saved = processor.save(outcome.transactions, args.user_id, args.account_type, args.file_id)
        payload["savedCount"] = len(saved)
        payload["message"] = f"Successfully saved {len(saved)} transactions"

    _print_json(payload)
    if outcome.requires_password or outcome.requires_page_selection:
        return 2
    return 0 if outcome.success else 1


def duplicates_command(processor: StatementProcessor, args) -> int:
    """List duplicate groups for a user."""
    report = processor.find_duplicates(args.user_id)
    _print_json(report.to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LedgerFlow statement processing")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check-password", help="Check whether a PDF needs a password")
    check.add_argument("file")
    check.set_defaults(handler=check_password_command)

    extract = subparsers.add_parser("extract", help="Extract statement text")
    extract.add_argument("file")
    extract.add_argument("--password")
    extract.set_defaults(handler=extract_command)

    process = subparsers.add_parser("process", help="Extract and categorize a statement")
    process.add_argument("file")
    process.add_argument("--password")
    process.add_argument("--pages", type=_parse_pages, help="Comma-separated 1-based page numbers (PDF)")
    process.add_argument("--save", action="store_true", help="Save categorized transactions")
    process.add_argument("--user-id", type=int, default=1)
    process.add_argument("--account-type", choices=ACCOUNT_TYPES, default="bank_account")
    process.add_argument("--file-id", help="Upload identifier recorded as file source")
    process.set_defaults(handler=process_command)

    duplicates = subparsers.add_parser("duplicates", help="Find duplicate transactions")
    duplicates.add_argument("--user-id", type=int, default=1)
    duplicates.set_defaults(handler=duplicates_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the ledgerflow command."""
    args = build_parser().parse_args(argv)

    try:
        config_manager = ConfigManager()
        config = config_manager.load_config()

        is_valid, message = config_manager.validate_config(config, require_api_key=args.command == "process")
        if not is_valid:
            logger.critical(f"Invalid configuration: {message}")
            return 1

        settings = get_settings()
        configure_logging(
            config.log_level,
            settings.log_max_file_size_mb,
            settings.log_backup_count,
            settings.log_file
        )

        processor = StatementProcessor(config)
        return args.handler(processor, args)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 130
    except Exception as e:
        logger.critical(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
