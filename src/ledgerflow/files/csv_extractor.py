"""CSV statement extraction."""
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

import pandas as pd

from ledgerflow.utils.logger import get_logger
from ledgerflow.utils.exceptions import ErrorCode, ExtractionError
from .rows import missing_column_classes, rows_to_text

logger = get_logger()


class CSVExtractor:
    """Turns a bank CSV export into a model-ready text blob."""

    ENCODINGS = ("utf-8-sig", "latin1")

    def __init__(self, chunk_size: int = 500):
        """
        Initialize CSV extractor.

        Args:
            chunk_size: Rows read from disk per chunk
        """
        self.chunk_size = chunk_size

    def extract(self, csv_path: Path) -> str:
        """
        Extract statement rows from a CSV file.

        Args:
            csv_path: Path to CSV file

        Returns:
            One ``key: value, ...`` line per row

        Raises:
            ExtractionError: invalid_csv_format, empty_csv or csv_parsing_failed
        """
        csv_path = Path(csv_path)

        for encoding in self.ENCODINGS:
            try:
                rows = self._collect_rows(self.iter_rows(csv_path, encoding))
                break
            except UnicodeDecodeError:
                logger.debug(f"{csv_path.name} is not {encoding}, trying next encoding")
                continue
            except pd.errors.EmptyDataError:
                raise ExtractionError(ErrorCode.EMPTY_CSV, "CSV file has no rows")
            except pd.errors.ParserError as e:
                raise ExtractionError(ErrorCode.CSV_PARSING_FAILED, f"Could not parse CSV: {e}")
        else:
            raise ExtractionError(
                ErrorCode.CSV_PARSING_FAILED,
                f"Could not decode CSV with any of: {', '.join(self.ENCODINGS)}"
            )

        if not rows:
            raise ExtractionError(ErrorCode.EMPTY_CSV, "CSV file has no transaction rows")

        logger.info(f"Extracted {len(rows)} rows from {csv_path.name}")
        return rows_to_text(rows)

    def iter_rows(self, csv_path: Path, encoding: str = "utf-8-sig") -> Iterator[Dict[str, str]]:
        """Lazily yield rows as ``{header: cell}`` dicts, chunk by chunk."""
        with pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            encoding=encoding,
            chunksize=self.chunk_size
        ) as reader:
            for chunk in reader:
                yield from chunk.to_dict(orient="records")

    @staticmethod
    def _collect_rows(rows: Iterable[Dict[str, str]]) -> List[Dict[str, str]]:
        """Validate headers on the first row, then accumulate every row."""
        collected = []
        for row in rows:
            if not collected:
                missing = missing_column_classes(row.keys())
                if missing:
                    raise ExtractionError(
                        ErrorCode.INVALID_CSV_FORMAT,
                        f"CSV has no {', '.join(missing)} column"
                    )
            collected.append(row)
        return collected
