"""Excel statement extraction (xls/xlsx, first worksheet only)."""
from pathlib import Path

import pandas as pd

from ledgerflow.utils.logger import get_logger
from ledgerflow.utils.exceptions import ErrorCode, ExtractionError
from .rows import missing_column_classes, rows_to_text

logger = get_logger()


class ExcelExtractor:
    """Turns the first sheet of a workbook into a model-ready text blob."""

    def extract(self, excel_path: Path) -> str:
        """
        Extract statement rows from the first worksheet.

        Args:
            excel_path: Path to .xls or .xlsx file

        Returns:
            One ``key: value, ...`` line per non-blank row

        Raises:
            ExtractionError: no_sheets_found, empty_excel,
                invalid_excel_format or excel_parsing_failed
        """
        excel_path = Path(excel_path)

        try:
            with pd.ExcelFile(excel_path) as workbook:
                if not workbook.sheet_names:
                    raise ExtractionError(ErrorCode.NO_SHEETS_FOUND, "Workbook has no sheets")

                sheet_name = workbook.sheet_names[0]
                frame = workbook.parse(sheet_name)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Excel parsing failed for {excel_path.name}: {e}")
            raise ExtractionError(ErrorCode.EXCEL_PARSING_FAILED, f"Could not read workbook: {e}")

        frame = frame.dropna(how="all")
        if frame.empty:
            raise ExtractionError(ErrorCode.EMPTY_EXCEL, f"Sheet '{sheet_name}' has no rows")

        missing = missing_column_classes(frame.columns)
        if missing:
            raise ExtractionError(
                ErrorCode.INVALID_EXCEL_FORMAT,
                f"Sheet '{sheet_name}' has no {', '.join(missing)} column"
            )

        # Blank cells are left out of the row, as spreadsheet exports do
        rows = [
            {str(key): value for key, value in record.items() if not pd.isna(value)}
            for record in frame.to_dict(orient="records")
        ]

        logger.info(f"Extracted {len(rows)} rows from sheet '{sheet_name}' of {excel_path.name}")
        return rows_to_text(rows)
