#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data preparation module: raw cell coercion and the in-memory workbook.
A workbook is an ordered set of sheets, each a grid of raw cell values
(numbers, strings or empty) exactly as the spreadsheet reader produced them.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from ..utils import get_logger

logger = get_logger(__name__)

Grid = List[List[Any]]

def is_empty_cell(value: Any) -> bool:
    """True for None, NaN/NaT and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False

def to_number(value: Any) -> Optional[float]:
    """
    Coerce a raw cell to a finite float.

    Returns None for empty cells, booleans, unparsable strings and
    non-finite numbers, so missing data stays distinguishable from zero.
    """
    if is_empty_cell(value) or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        try:
            num = float(value)
        except (TypeError, ValueError):
            return None
    return num if math.isfinite(num) else None

def frame_to_grid(df: pd.DataFrame) -> Grid:
    """Convert a header-less DataFrame into a grid, NaN cells becoming None."""
    if df is None or df.empty:
        return []
    cleaned = df.astype(object).where(pd.notna(df), None)
    return [list(row) for row in cleaned.itertuples(index=False, name=None)]

class Workbook:
    """
    Ordered collection of sheet grids.

    Sheets may be given as grids (lists of rows) or as DataFrames read
    without a header row.
    """

    def __init__(self, sheets: Mapping[str, Any]):
        self._sheets: Dict[str, Grid] = {}
        for name, content in sheets.items():
            if isinstance(content, pd.DataFrame):
                grid = frame_to_grid(content)
            else:
                grid = [list(row) if row is not None else [] for row in (content or [])]
            self._sheets[str(name)] = grid
        logger.debug(f"Workbook with {len(self._sheets)} sheet(s): {list(self._sheets)}")

    @classmethod
    def from_frames(cls, frames: Mapping[str, pd.DataFrame]) -> "Workbook":
        return cls(frames)

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def grid(self, name: str) -> Grid:
        return self._sheets[name]

    def row_count(self, name: str) -> int:
        return len(self._sheets[name])

    def __len__(self) -> int:
        return len(self._sheets)

    def __repr__(self) -> str:
        shapes = ", ".join(f"{n!r}: {len(g)} rows" for n, g in self._sheets.items())
        return f"Workbook({shapes})"
