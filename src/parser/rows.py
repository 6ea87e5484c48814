#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Row extractor: read one labeled row as a year-aligned series or a scalar.
"""

from typing import Any, NamedTuple, Optional, Sequence, Tuple

from ..data.prep import to_number
from .years import YearColumn

class RowValues(NamedTuple):
    series: Optional[Tuple[Optional[float], ...]] = None
    scalar: Optional[float] = None

    @property
    def is_series(self) -> bool:
        return self.series is not None

def _cell(row: Sequence[Any], col: int) -> Any:
    return row[col] if col < len(row) else None

def extract_row(row: Sequence[Any], year_columns: Sequence[YearColumn]) -> Optional[RowValues]:
    """
    Extract the numbers of a labeled row.

    With year columns, one value per year column is read (None where the cell
    is empty or non-numeric); the row is a series if any position is present.
    Otherwise the first numeric cell after the label becomes a scalar.

    Args:
        row: Raw cell values, label in column 0
        year_columns: Year columns of the sheet (may be empty)

    Returns:
        RowValues with either series or scalar set, or None if the row has no numbers
    """
    if year_columns:
        values = tuple(to_number(_cell(row, yc.column)) for yc in year_columns)
        if any(v is not None for v in values):
            return RowValues(series=values)

    for c in range(1, len(row)):
        num = to_number(row[c])
        if num is not None:
            return RowValues(scalar=num)
    return None
