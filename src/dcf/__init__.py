"""Metric derivation, valuation analytics and dashboard data."""

from .derive import apply_derivations, derive_metrics
from .analytics import (
    npv, irr_cash_flows, solve_irr, estimate_irr, irr_for_model,
    gordon_multiple, SensitivityGrid, sensitivity_cell, sensitivity_grid, sensitivity_for_model,
)
from .dashboard import (
    format_value, growth_rates, waterfall, valuation_breakdown, summary_cards, build_dashboard
)

__all__ = [
    "apply_derivations", "derive_metrics",
    "npv", "irr_cash_flows", "solve_irr", "estimate_irr", "irr_for_model",
    "gordon_multiple", "SensitivityGrid", "sensitivity_cell", "sensitivity_grid", "sensitivity_for_model",
    "format_value", "growth_rates", "waterfall", "valuation_breakdown", "summary_cards", "build_dashboard",
]
