#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Year detector: find the header row that maps columns to fiscal years.
"""

import re
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from ..data.prep import is_empty_cell, to_number
from ..utils import (
    get_logger, YEAR_MIN, YEAR_MAX, YEAR_SCAN_ROWS, YEAR_FALLBACK_SCAN_ROWS, MIN_YEAR_COLUMNS
)

logger = get_logger(__name__)

_YEAR_IN_TEXT = re.compile(r"(20\d{2})")

class YearColumn(NamedTuple):
    column: int
    year: int

def as_year(value: Any) -> Optional[int]:
    """Return the cell as an int year when it is an integer in [YEAR_MIN, YEAR_MAX]."""
    num = to_number(value)
    if num is None or not num.is_integer():
        return None
    year = int(num)
    return year if YEAR_MIN <= year <= YEAR_MAX else None

def _year_in_text(value: Any) -> Optional[int]:
    # Catches headers like "FY2025" or "2025E"
    if is_empty_cell(value):
        return None
    m = _YEAR_IN_TEXT.search(str(value))
    return int(m.group(1)) if m else None

def _scan(grid: Sequence[Sequence[Any]], max_rows: int, pick) -> Optional[Tuple[int, List[YearColumn]]]:
    for r, row in enumerate(grid[:max_rows]):
        if not row:
            continue
        cols = []
        for c in range(1, len(row)):
            year = pick(row[c])
            if year is not None:
                cols.append(YearColumn(c, year))
        if len(cols) >= MIN_YEAR_COLUMNS:
            return r, cols
    return None

def detect_years(grid: Sequence[Sequence[Any]]) -> Optional[Tuple[int, List[YearColumn]]]:
    """
    Locate the year row of a sheet.

    Numeric year cells in the first YEAR_SCAN_ROWS rows are tried first;
    if no row has at least two, captions containing "20xx" in the first
    YEAR_FALLBACK_SCAN_ROWS rows are accepted instead. Column 0 is the
    label column and is never a year.

    Returns:
        (row_index, year_columns) or None when the sheet has no year row
    """
    found = _scan(grid, YEAR_SCAN_ROWS, as_year)
    if found is None:
        found = _scan(grid, YEAR_FALLBACK_SCAN_ROWS, _year_in_text)
        if found is not None:
            logger.debug(f"Year row {found[0]} detected from text headers")
    if found is not None:
        logger.debug(f"Year row {found[0]}: {[yc.year for yc in found[1]]}")
    return found
