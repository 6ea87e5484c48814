#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Valuation analytics: IRR estimate and WACC x terminal-growth sensitivity grid.

Rates passed in and returned are in percent (9.0 means 9%), matching the
scalars produced by the metric deriver.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..data.model import ExtractedModel
from ..utils import (
    get_logger,
    IRR_INITIAL_RATE, IRR_MAX_ITER, IRR_DERIVATIVE_EPS, IRR_STEP_TOL, IRR_MIN_RATE, IRR_MAX_RATE,
    SENSITIVITY_WACC_OFFSETS, SENSITIVITY_GROWTH_OFFSETS,
)

logger = get_logger(__name__)

def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """Net present value with the first flow at t=0 (rate as a decimal)."""
    flows = np.asarray(cash_flows, dtype=float)
    t = np.arange(len(flows))
    return float(np.sum(flows / (1.0 + rate) ** t))

def _npv_derivative(rate: float, flows: np.ndarray) -> float:
    t = np.arange(len(flows))
    return float(np.sum(-t * flows / (1.0 + rate) ** (t + 1)))

def irr_cash_flows(
    fcfs: Sequence[Optional[float]], enterprise_value: float, terminal_value: Optional[float] = None
) -> Optional[List[float]]:
    """
    Build [-EV, fcf1, fcf2, ...] from the present FCF entries.

    Terminal value is added to the final flow. Returns None with fewer
    than two present FCF entries.
    """
    present = [float(v) for v in fcfs if v is not None]
    if len(present) < 2:
        return None
    flows = [-float(enterprise_value)] + present
    if terminal_value:
        flows[-1] += float(terminal_value)
    return flows

def solve_irr(cash_flows: Sequence[float]) -> Optional[float]:
    """
    Newton-Raphson IRR of a cash-flow sequence.

    Returns:
        Rate as a decimal, or None when the derivative flattens, the iterate
        leaves (IRR_MIN_RATE, IRR_MAX_RATE) or no convergence within IRR_MAX_ITER
    """
    flows = np.asarray(cash_flows, dtype=float)
    rate = IRR_INITIAL_RATE
    for _ in range(IRR_MAX_ITER):
        value = npv(rate, flows)
        slope = _npv_derivative(rate, flows)
        if abs(slope) < IRR_DERIVATIVE_EPS:
            logger.debug(f"IRR: flat NPV at rate {rate:.6f}")
            return None
        nxt = rate - value / slope
        if abs(nxt - rate) < IRR_STEP_TOL:
            return nxt
        rate = nxt
        if rate < IRR_MIN_RATE or rate > IRR_MAX_RATE:
            logger.debug(f"IRR: diverged to {rate:.4f}")
            return None
    logger.debug(f"IRR: no convergence after {IRR_MAX_ITER} iterations")
    return None

def estimate_irr(
    fcfs: Sequence[Optional[float]], enterprise_value: float, terminal_value: Optional[float] = None
) -> Optional[float]:
    """
    IRR that equates the FCF stream (plus terminal value) with enterprise value.

    Args:
        fcfs: Year-aligned FCF series, None where absent
        enterprise_value: Price paid at t=0
        terminal_value: Optional terminal value added to the final year

    Returns:
        IRR in percent, or None when it cannot be computed
    """
    flows = irr_cash_flows(fcfs, enterprise_value, terminal_value)
    if flows is None:
        return None
    rate = solve_irr(flows)
    return rate * 100.0 if rate is not None else None

def irr_for_model(model: ExtractedModel) -> Optional[float]:
    fcf = model.series.get("fcf")
    ev = model.scalars.get("enterprise_value")
    if fcf is None or not ev:
        return None
    return estimate_irr(fcf, ev, model.scalars.get("terminal_value"))

def gordon_multiple(wacc: float, growth: float) -> Optional[float]:
    """(1+g)/(w-g) for decimal rates, None when w <= g."""
    if wacc <= growth:
        return None
    return (1.0 + growth) / (wacc - growth)

@dataclass(frozen=True)
class SensitivityGrid:
    """Enterprise value across WACC (rows) and terminal growth (columns), percent inputs."""

    base_wacc: float
    base_growth: float
    base_enterprise_value: Optional[float]
    latest_fcf: Optional[float]
    wacc_values: Tuple[float, ...]
    growth_values: Tuple[float, ...]
    cells: Tuple[Tuple[Optional[float], ...], ...]

    def cell(self, wacc_offset: float, growth_offset: float) -> Optional[float]:
        """Look up a cell by its percentage-point offsets from the base case."""
        i = list(SENSITIVITY_WACC_OFFSETS).index(wacc_offset)
        j = list(SENSITIVITY_GROWTH_OFFSETS).index(growth_offset)
        return self.cells[i][j]

    @property
    def center(self) -> Optional[float]:
        return self.cell(0.0, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_wacc": self.base_wacc,
            "base_growth": self.base_growth,
            "base_enterprise_value": self.base_enterprise_value,
            "latest_fcf": self.latest_fcf,
            "wacc_values": list(self.wacc_values),
            "growth_values": list(self.growth_values),
            "cells": [list(row) for row in self.cells],
        }

def sensitivity_cell(
    wacc: float,
    growth: float,
    base_wacc: float,
    base_growth: float,
    base_enterprise_value: Optional[float] = None,
    latest_fcf: Optional[float] = None,
) -> Optional[float]:
    """
    Enterprise value for one (WACC, growth) pair, all rates in percent.

    A positive latest FCF is capitalized directly with Gordon growth;
    otherwise the base EV is scaled by the ratio of Gordon multiples.
    """
    multiple = gordon_multiple(wacc / 100.0, growth / 100.0)
    if multiple is None:
        return None
    if latest_fcf is not None and latest_fcf > 0:
        return latest_fcf * multiple
    if not base_enterprise_value:
        return None
    base_multiple = gordon_multiple(base_wacc / 100.0, base_growth / 100.0)
    if base_multiple is None:
        return base_enterprise_value
    return base_enterprise_value * (multiple / base_multiple)

def sensitivity_grid(
    base_wacc: float,
    base_growth: float,
    base_enterprise_value: Optional[float] = None,
    latest_fcf: Optional[float] = None,
) -> SensitivityGrid:
    """
    Build the 7x5 sensitivity grid around a base case.

    Args:
        base_wacc: WACC in percent
        base_growth: Terminal growth in percent
        base_enterprise_value: Base-case EV
        latest_fcf: Most recent FCF; when positive it drives every cell

    Returns:
        SensitivityGrid; degenerate cells (WACC <= growth) are None
    """
    wacc_values = tuple(base_wacc + d for d in SENSITIVITY_WACC_OFFSETS)
    growth_values = tuple(base_growth + d for d in SENSITIVITY_GROWTH_OFFSETS)
    cells = tuple(
        tuple(
            sensitivity_cell(w, g, base_wacc, base_growth, base_enterprise_value, latest_fcf)
            for g in growth_values
        )
        for w in wacc_values
    )
    undefined = sum(v is None for row in cells for v in row)
    if undefined:
        logger.debug(f"Sensitivity grid: {undefined} undefined cell(s)")
    return SensitivityGrid(
        base_wacc=base_wacc,
        base_growth=base_growth,
        base_enterprise_value=base_enterprise_value,
        latest_fcf=latest_fcf,
        wacc_values=wacc_values,
        growth_values=growth_values,
        cells=cells,
    )

def sensitivity_for_model(model: ExtractedModel) -> Optional[SensitivityGrid]:
    """Grid from the model's WACC, terminal growth, EV and latest FCF, if available."""
    wacc = model.scalars.get("wacc")
    growth = model.scalars.get("terminal_growth")
    ev = model.scalars.get("enterprise_value")
    latest_fcf = model.latest("fcf")
    if wacc is None or growth is None or (ev is None and latest_fcf is None):
        return None
    return sensitivity_grid(wacc, growth, ev, latest_fcf)
