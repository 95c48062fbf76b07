"""Header validation and row serialization shared by CSV and Excel."""
from datetime import datetime
from typing import Dict, Iterable, List

DATE_KEYWORDS = ("date",)
DESCRIPTION_KEYWORDS = ("desc", "detail", "narrative", "transaction")
AMOUNT_KEYWORDS = ("amount", "value", "debit", "credit")

COLUMN_CLASSES = {
    "date": DATE_KEYWORDS,
    "description": DESCRIPTION_KEYWORDS,
    "amount": AMOUNT_KEYWORDS,
}


def missing_column_classes(headers: Iterable[str]) -> List[str]:
    """
    Find which required column classes a header row lacks.

    A class is present when at least one header contains one of its
    keywords (case-insensitive substring match).

    Args:
        headers: Column names

    Returns:
        Names of the missing classes, empty if the header row is usable
    """
    lowered = [str(header).lower() for header in headers]
    return [
        name
        for name, keywords in COLUMN_CLASSES.items()
        if not any(keyword in header for header in lowered for keyword in keywords)
    ]


def format_value(value) -> str:
    """Render a cell value the way the model prompt expects it."""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_row(row: Dict) -> str:
    """Serialize a row as ``key: value`` pairs joined by commas."""
    return ", ".join(f"{key}: {format_value(value)}" for key, value in row.items())


def rows_to_text(rows: Iterable[Dict]) -> str:
    """One line per row."""
    return "\n".join(format_row(row) for row in rows)
