"""Spreadsheet loading, cell preparation and the extracted model type."""

from .loader import load_workbook, load_from_csv, load_from_excel, WorkbookReadError
from .model import ExtractedModel
from .prep import Workbook, is_empty_cell, to_number, frame_to_grid

__all__ = [
    "load_workbook", "load_from_csv", "load_from_excel", "WorkbookReadError",
    "ExtractedModel",
    "Workbook", "is_empty_cell", "to_number", "frame_to_grid",
]
