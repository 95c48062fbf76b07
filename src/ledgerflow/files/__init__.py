"""Statement file extraction module."""
from .models import ExtractionResult, PAGE_BREAK
from .csv_extractor import CSVExtractor
from .excel_extractor import ExcelExtractor

__all__ = ["ExtractionResult", "PAGE_BREAK", "CSVExtractor", "ExcelExtractor"]
