#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data loading module: read spreadsheet files into an in-memory Workbook.
pandas (openpyxl for xlsx/xlsm, xlrd for legacy xls) does all byte-level
parsing; every sheet is read without a header row so the raw grid reaches
the parser intact.
"""

import csv
import io
import os
from typing import Optional, Union

import pandas as pd

from ..utils import get_logger, SUPPORTED_EXTENSIONS
from .prep import Workbook

logger = get_logger(__name__)

# Readers pandas should use per extension; None lets pandas pick
EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}

class WorkbookReadError(ValueError):
    """Raised when a file cannot be read as a spreadsheet."""

    pass

def _extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lower()

def _csv_text(source: Union[str, bytes]) -> str:
    try:
        if isinstance(source, bytes):
            return source.decode("utf-8-sig")
        with open(source, "r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise WorkbookReadError(f"Failed to read CSV: {e}") from e

def _max_fields(text: str) -> int:
    """Widest row of a CSV; captions above the year row are often a single cell."""
    return max((len(row) for row in csv.reader(io.StringIO(text))), default=0)

def load_from_csv(source: Union[str, bytes], sheet_name: str = "Sheet1") -> Workbook:
    """
    Load a CSV file as a single-sheet workbook.

    Rows may have different numbers of fields; short rows are padded with
    empty cells up to the widest row.

    Args:
        source: File path or raw bytes
        sheet_name: Name given to the only sheet
    """
    text = _csv_text(source)
    try:
        width = _max_fields(text)
        if width == 0:
            df = pd.DataFrame()
        else:
            df = pd.read_csv(
                io.StringIO(text),
                header=None,
                names=list(range(width)),
                skip_blank_lines=False,
                low_memory=False,
            )
    except (csv.Error, ValueError, pd.errors.ParserError) as e:
        raise WorkbookReadError(f"Failed to read CSV: {e}") from e
    logger.info(f"Loaded {len(df):,} rows ({df.shape[1]} columns) from CSV")
    return Workbook.from_frames({sheet_name: df})

def load_from_excel(source: Union[str, bytes], engine: Optional[str] = None) -> Workbook:
    """
    Load every sheet of an Excel workbook.

    Args:
        source: File path or raw bytes
        engine: pandas Excel engine ("openpyxl", "xlrd"), None to let pandas choose

    Returns:
        Workbook preserving the file's sheet order
    """
    buf = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        frames = pd.read_excel(buf, sheet_name=None, header=None, engine=engine)
    except Exception as e:
        raise WorkbookReadError(f"Failed to read workbook: {e}") from e
    logger.info(
        f"Loaded {len(frames)} sheet(s): "
        + ", ".join(f"{name} ({len(df)} rows)" for name, df in frames.items())
    )
    return Workbook.from_frames(frames)

def load_workbook(source: Union[str, bytes], filename: Optional[str] = None) -> Workbook:
    """
    Load a spreadsheet from a path or an uploaded byte buffer.

    Args:
        source: File path or raw bytes
        filename: Original file name, required to pick a reader for bytes

    Returns:
        Workbook

    Raises:
        WorkbookReadError: Unsupported extension, missing file or unreadable content
    """
    name = filename or (source if isinstance(source, str) else None)
    ext = _extension(name)
    if ext not in SUPPORTED_EXTENSIONS:
        raise WorkbookReadError(
            f"Unsupported file type '{ext or 'unknown'}'. Expected one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    if isinstance(source, str) and not os.path.exists(source):
        raise WorkbookReadError(f"File not found: {source}")

    if ext == ".csv":
        sheet = os.path.splitext(os.path.basename(name))[0] or "Sheet1"
        return load_from_csv(source, sheet_name=sheet)
    return load_from_excel(source, engine=EXCEL_ENGINES.get(ext))

if __name__ == "__main__":
    import sys
    if len(sys.argv) < 2:
        print("Usage: python -m src.data.loader <workbook>")
        sys.exit(1)
    wb = load_workbook(sys.argv[1])
    print(wb)
