#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Metric deriver: fill in values a spreadsheet implies but does not state.

Rules run once, in a fixed order, because later rules read what earlier
ones filled in (e.g. margins use a derived gross profit). A missing input
at some year index leaves that index absent; nothing is ever treated as
zero unless stated below.
"""

from typing import Dict, List, Optional, Sequence

from ..data.model import ExtractedModel
from ..utils import get_logger

logger = get_logger(__name__)

Values = List[Optional[float]]

MARGIN_SOURCES = [
    ("gross_margin", "gross_profit"),
    ("ebitda_margin", "ebitda"),
    ("net_margin", "net_income"),
]

def _first_present(values: Sequence[Optional[float]]) -> Optional[float]:
    for v in values:
        if v is not None:
            return v
    return None

def _last_present(values: Sequence[Optional[float]]) -> Optional[float]:
    for v in reversed(values):
        if v is not None:
            return v
    return None

def _combine(a: Sequence[Optional[float]], b: Sequence[Optional[float]], op) -> Values:
    return [op(x, y) if x is not None and y is not None else None for x, y in zip(a, b)]

def _margin(numerator: Sequence[Optional[float]], revenue: Sequence[Optional[float]]) -> Values:
    # Absent numerator counts as zero; zero or absent revenue leaves the year blank
    return [((n or 0.0) / r) * 100.0 if r else None for n, r in zip(numerator, revenue)]

def _derive_series(series: Dict[str, Values]) -> None:
    if "gross_profit" not in series and "revenue" in series and "cogs" in series:
        series["gross_profit"] = _combine(series["revenue"], series["cogs"], lambda r, c: r - abs(c))
        logger.debug("Derived gross_profit = revenue - |cogs|")

    if "ebitda" not in series and "ebit" in series and "da" in series:
        series["ebitda"] = _combine(series["ebit"], series["da"], lambda e, d: e + abs(d))
        logger.debug("Derived ebitda = ebit + |da|")

    if "ebit" not in series and "ebitda" in series and "da" in series:
        series["ebit"] = _combine(series["ebitda"], series["da"], lambda e, d: e - abs(d))
        logger.debug("Derived ebit = ebitda - |da|")

    if "revenue" in series:
        for margin_key, source_key in MARGIN_SOURCES:
            if margin_key not in series and source_key in series:
                series[margin_key] = _margin(series[source_key], series["revenue"])
                logger.debug(f"Derived {margin_key} from {source_key}")

def _derive_scalars(series: Dict[str, Values], scalars: Dict[str, float]) -> None:
    for key in ("wacc", "terminal_growth"):
        if key not in scalars and key in series:
            v = _first_present(series[key])
            if v is not None:
                scalars[key] = v

    # Rates entered as fractions (0.09) are shown as percent (9.0)
    for key in ("wacc", "terminal_growth"):
        v = scalars.get(key)
        if v is not None and 0 < v < 1:
            scalars[key] = v * 100.0

    for key in ("enterprise_value", "terminal_value", "equity_value"):
        if key not in scalars and key in series:
            v = _last_present(series[key])
            if v is not None:
                scalars[key] = v

    # No net debt available: equity value approximated by enterprise value
    if "equity_value" not in scalars and "enterprise_value" in scalars:
        scalars["equity_value"] = scalars["enterprise_value"]

    if "pv_fcf" not in scalars and "pv_fcf" in series:
        scalars["pv_fcf"] = sum(v for v in series["pv_fcf"] if v is not None)

    if "pv_terminal" not in scalars and "pv_terminal" in series:
        v = _last_present(series["pv_terminal"])
        if v is not None:
            scalars["pv_terminal"] = v

    ev = scalars.get("enterprise_value")
    if ev is not None:
        if "pv_terminal" in scalars and "pv_fcf" not in scalars:
            scalars["pv_fcf"] = ev - scalars["pv_terminal"]
        elif "pv_fcf" in scalars and "pv_terminal" not in scalars:
            scalars["pv_terminal"] = ev - scalars["pv_fcf"]

def apply_derivations(series: Dict[str, Values], scalars: Dict[str, float], years: Sequence[int]) -> None:
    """
    Apply every derivation rule in place.

    Args:
        series: Canonical key -> year-aligned values (mutated)
        scalars: Canonical key -> value (mutated)
        years: Detected years; derived series keep the same length
    """
    _derive_series(series)
    _derive_scalars(series, scalars)
    for key, values in series.items():
        if len(values) != len(years):
            raise ValueError(f"Series '{key}' is misaligned with {len(years)} years")

def derive_metrics(model: ExtractedModel) -> ExtractedModel:
    """Return a new model with derived series and scalars filled in."""
    series = {k: list(v) for k, v in model.series.items()}
    scalars = dict(model.scalars)
    apply_derivations(series, scalars, model.years)

    added = sorted((set(series) - set(model.series)) | (set(scalars) - set(model.scalars)))
    if added:
        logger.debug(f"Derived metrics: {', '.join(added)}")
    return ExtractedModel.build(
        model.years, series, scalars, sheet_name=model.sheet_name, conflicts=model.conflicts
    )
