#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sheet selection and whole-workbook extraction.

Each sheet is parsed independently (year row + labeled rows), completed by
the metric deriver, and scored; the best-scoring sheet becomes the model.
Weak results are rejected instead of producing a near-empty model.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..data.model import ExtractedModel
from ..data.prep import Workbook, is_empty_cell
from ..dcf.derive import derive_metrics
from ..utils import get_logger, PREFERRED_SHEET_KEYWORDS, MIN_MODEL_SCORE
from .labels import match_label, normalize
from .rows import extract_row
from .years import detect_years

logger = get_logger(__name__)

def select_sheet(workbook: Workbook) -> Optional[str]:
    """
    Pick the sheet most likely to hold the valuation model.

    A sheet whose normalized name contains a preferred keyword wins (keywords
    tried in order); otherwise the sheet with the most rows, first on ties.
    """
    names = workbook.sheet_names
    if not names:
        return None

    for keyword in PREFERRED_SHEET_KEYWORDS:
        for name in names:
            if keyword in normalize(name):
                logger.debug(f"Sheet '{name}' preferred by keyword '{keyword}'")
                return name

    best, best_rows = names[0], 0
    for name in names:
        rows = workbook.row_count(name)
        if rows > best_rows:
            best, best_rows = name, rows
    logger.debug(f"No preferred sheet name; using largest sheet '{best}' ({best_rows} rows)")
    return best

def parse_sheet(grid: Sequence[Sequence[Any]], sheet_name: Optional[str] = None) -> Optional[ExtractedModel]:
    """
    Extract raw series and scalars from one grid, without derived metrics.

    Returns:
        ExtractedModel, or None for grids under 2 rows or with no labeled rows
    """
    if not grid or len(grid) < 2:
        return None

    found = detect_years(grid)
    year_row, year_cols = found if found is not None else (None, [])
    years = [yc.year for yc in year_cols]

    series: Dict[str, Tuple[Optional[float], ...]] = {}
    scalars: Dict[str, float] = {}
    conflicts: List[str] = []

    for r, row in enumerate(grid):
        if r == year_row or not row or is_empty_cell(row[0]):
            continue
        key = match_label(row[0])
        if key is None:
            continue
        values = extract_row(row, year_cols)
        if values is None:
            continue

        # Duplicate captions: the later row replaces the earlier one of the same kind
        target = series if values.is_series else scalars
        if key in target:
            logger.warning(
                f"Sheet '{sheet_name}': row {r} ({row[0]!r}) overrides an earlier '{key}' row"
            )
            if key not in conflicts:
                conflicts.append(key)
        if values.is_series:
            series[key] = values.series
        else:
            scalars[key] = values.scalar

    if not series and not scalars:
        return None

    return ExtractedModel.build(years, series, scalars, sheet_name=sheet_name, conflicts=conflicts)

def extract_sheet(grid: Sequence[Sequence[Any]], sheet_name: Optional[str] = None) -> Optional[ExtractedModel]:
    """Parse a grid and fill in derived metrics."""
    model = parse_sheet(grid, sheet_name)
    if model is None:
        return None
    return derive_metrics(model)

def score_model(model: ExtractedModel) -> int:
    """Scalars count double: they are the valuation outputs the dashboard needs most."""
    return len(model.series) + 2 * len(model.scalars)

def candidate_sheets(workbook: Workbook) -> List[str]:
    """Selected sheet first, then every other sheet in workbook order."""
    order: List[str] = []
    first = select_sheet(workbook)
    for name in ([first] if first is not None else []) + workbook.sheet_names:
        if name not in order:
            order.append(name)
    return order

def extract_best(workbook: Workbook) -> Optional[ExtractedModel]:
    """
    Extract the best model found anywhere in the workbook.

    Args:
        workbook: Workbook to scan

    Returns:
        Highest-scoring ExtractedModel, or None if no sheet reaches MIN_MODEL_SCORE
    """
    best: Optional[ExtractedModel] = None
    best_score = 0

    for name in candidate_sheets(workbook):
        model = extract_sheet(workbook.grid(name), sheet_name=name)
        if model is None:
            logger.debug(f"Sheet '{name}': no model")
            continue
        score = score_model(model)
        logger.debug(f"Sheet '{name}': score {score} ({len(model.series)} series, {len(model.scalars)} scalars)")
        if score > best_score:
            best, best_score = model, score

    if best is None:
        logger.warning("No DCF model detected in any sheet")
        return None
    if best_score < MIN_MODEL_SCORE:
        logger.warning(
            f"Best sheet '{best.sheet_name}' scored {best_score} (< {MIN_MODEL_SCORE}); rejecting"
        )
        return None

    logger.info(f"Extracted model from sheet '{best.sheet_name}' (score {best_score})")
    return best
