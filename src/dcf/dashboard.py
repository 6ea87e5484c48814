#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dashboard data: the numbers behind the summary cards and charts.
Nothing here renders; callers get plain values and formatted strings.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from ..data.model import ExtractedModel
from .analytics import irr_for_model, sensitivity_for_model

GROWTH_METRICS = [
    ("revenue", "Revenue"),
    ("ebitda", "EBITDA"),
    ("fcf", "FCF"),
    ("net_income", "Net Income"),
]

WATERFALL_STEPS = [
    ("revenue", "Revenue"),
    ("ebitda", "EBITDA"),
    ("ebit", "EBIT"),
    ("net_income", "Net Income"),
    ("fcf", "FCF"),
]

def format_value(value: Optional[float], pct: bool = False, dollar: bool = True) -> str:
    """
    Compact display string: "$1.23B", "$4.5M", "$6.7K", "$12.00", "9.0%".
    Missing values render as "--".
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "--"
    if pct:
        return f"{value:.1f}%"
    a = abs(value)
    if not dollar:
        if a >= 1e9:
            return f"{value / 1e9:.1f}B"
        if a >= 1e6:
            return f"{value / 1e6:.1f}M"
        if a >= 1e3:
            return f"{value / 1e3:.1f}K"
        return f"{value:.1f}"
    if a >= 1e9:
        return f"${value / 1e9:.2f}B"
    if a >= 1e6:
        return f"${value / 1e6:.1f}M"
    if a >= 1e3:
        return f"${value / 1e3:.1f}K"
    return f"${value:.2f}"

def growth_rates(model: ExtractedModel) -> Dict[str, List[Optional[float]]]:
    """Year-over-year % change per metric, aligned with years[1:]."""
    out: Dict[str, List[Optional[float]]] = {}
    for key, _label in GROWTH_METRICS:
        values = model.series.get(key)
        if values is None:
            continue
        growth = []
        for prev, curr in zip(values, values[1:]):
            if prev is not None and curr is not None and prev != 0:
                growth.append((curr - prev) / abs(prev) * 100.0)
            else:
                growth.append(None)
        if any(g is not None for g in growth):
            out[key] = growth
    return out

def waterfall(model: ExtractedModel) -> List[Tuple[str, float]]:
    """Revenue down to FCF for the final year; empty when fewer than two steps exist."""
    if not model.years:
        return []
    steps = []
    for key, label in WATERFALL_STEPS:
        values = model.series.get(key)
        if values is not None and values[-1] is not None:
            steps.append((label, values[-1]))
    return steps if len(steps) >= 2 else []

def valuation_breakdown(model: ExtractedModel) -> Dict[str, float]:
    """Split of EV into PV of FCFs and PV of terminal value (absolute values, with shares)."""
    parts = {}
    if model.scalars.get("pv_fcf") is not None:
        parts["pv_fcf"] = abs(model.scalars["pv_fcf"])
    if model.scalars.get("pv_terminal") is not None:
        parts["pv_terminal"] = abs(model.scalars["pv_terminal"])
    total = sum(parts.values())
    if total:
        for key in list(parts):
            parts[f"{key}_pct"] = parts[key] / total * 100.0
    return parts

def summary_cards(model: ExtractedModel, irr: Optional[float] = None) -> Dict[str, str]:
    s = model.scalars
    return {
        "enterprise_value": format_value(s.get("enterprise_value")),
        "equity_value": format_value(s.get("equity_value")),
        "wacc": format_value(s.get("wacc"), pct=True),
        "terminal_growth": format_value(s.get("terminal_growth"), pct=True),
        "terminal_value": format_value(s.get("terminal_value")),
        "irr": format_value(irr, pct=True),
    }

def build_dashboard(model: ExtractedModel) -> Dict[str, Any]:
    """Everything a front end needs to draw the dashboard for one model."""
    irr = irr_for_model(model)
    grid = sensitivity_for_model(model)
    return {
        "model": model.to_dict(),
        "irr": irr,
        "cards": summary_cards(model, irr),
        "growth": growth_rates(model),
        "waterfall": [{"label": label, "value": value} for label, value in waterfall(model)],
        "valuation_breakdown": valuation_breakdown(model),
        "sensitivity": grid.to_dict() if grid is not None else None,
    }
