"""Spreadsheet-to-model extraction: labels, years, rows and sheet selection."""

from ..data.model import ExtractedModel
from .labels import LABEL_REGISTRY, CANONICAL_KEYS, LabelEntry, normalize, match_label
from .years import YearColumn, as_year, detect_years
from .rows import RowValues, extract_row
from .sheets import (
    select_sheet, parse_sheet, extract_sheet, score_model, candidate_sheets, extract_best
)

__all__ = [
    "ExtractedModel",
    "LABEL_REGISTRY", "CANONICAL_KEYS", "LabelEntry", "normalize", "match_label",
    "YearColumn", "as_year", "detect_years",
    "RowValues", "extract_row",
    "select_sheet", "parse_sheet", "extract_sheet", "score_model", "candidate_sheets", "extract_best",
]
