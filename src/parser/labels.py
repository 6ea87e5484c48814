#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Label matcher: map free-form row captions onto canonical metric keys.

The registry is an ordered priority list, not a lookup table: entries are
tried top to bottom and the first pattern that matches wins. Short,
ambiguous patterns ("tax", "ev", "tv") sit after longer specific ones, so
reordering the registry changes how captions are classified.
"""

import re
from typing import NamedTuple, Optional, Tuple

from ..utils import get_logger, LABEL_SLACK_CHARS

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")

def normalize(raw) -> str:
    """Lowercase, replace anything outside [a-z0-9 ] with a space, collapse and trim."""
    text = _NON_ALNUM.sub(" ", str(raw).lower())
    return _WHITESPACE.sub(" ", text).strip()

class LabelEntry(NamedTuple):
    key: str
    patterns: Tuple[str, ...]

def _entry(key: str, *patterns: str) -> LabelEntry:
    # Patterns are not normalized, so punctuated ones such as "d&a" never match a normalized label
    return LabelEntry(key, tuple(patterns))

LABEL_REGISTRY: Tuple[LabelEntry, ...] = (
    _entry("revenue", "revenue", "total revenue", "sales", "total sales", "net revenue", "net sales"),
    _entry("cogs", "cogs", "cost of goods", "cost of revenue", "cost of sales", "cos"),
    _entry("gross_profit", "gross profit", "gross income"),
    _entry("ebitda", "ebitda", "adj ebitda", "adjusted ebitda"),
    _entry("da", "depreciation & amortization", "depreciation and amortization", "d&a",
           "depreciation", "amortization", "dep & amort"),
    _entry("ebit", "ebit", "operating income", "operating profit", "op income"),
    _entry("net_income", "net income", "net profit", "net earnings", "profit after tax"),
    _entry("capex", "capex", "capital expenditure", "capital expenditures", "pp&e purchases", "purchases of ppe"),
    _entry("fcf", "free cash flow", "fcf", "unlevered free cash flow", "ufcf", "levered free cash flow", "fcff"),
    _entry("wacc", "wacc", "discount rate", "weighted average cost of capital", "cost of capital"),
    _entry("terminal_growth", "terminal growth", "terminal growth rate", "perpetuity growth",
           "long term growth", "ltg", "perpetual growth rate"),
    _entry("terminal_value", "terminal value", "tv", "continuing value"),
    _entry("enterprise_value", "enterprise value", "ev", "total enterprise value", "firm value"),
    _entry("equity_value", "equity value", "equity value per share", "share price", "implied share price",
           "price per share", "target price"),
    _entry("shares_outstanding", "shares outstanding", "diluted shares", "shares", "total shares"),
    _entry("pv_fcf", "pv of fcf", "pv of free cash flow", "present value of fcf",
           "present value of free cash flows", "npv of fcf", "pv fcf"),
    _entry("pv_terminal", "pv of terminal", "pv of tv", "present value of terminal", "pv terminal value"),
    _entry("tax", "taxes", "income tax", "tax expense", "provision for taxes", "tax"),
    _entry("interest_expense", "interest expense", "interest"),
    _entry("nwc", "change in nwc", "net working capital", "changes in working capital", "nwc", "working capital"),
    _entry("gross_margin", "gross margin"),
    _entry("ebitda_margin", "ebitda margin"),
    _entry("net_margin", "net margin", "net income margin", "profit margin"),
)

CANONICAL_KEYS: Tuple[str, ...] = tuple(entry.key for entry in LABEL_REGISTRY)

def _pattern_matches(label: str, pattern: str) -> bool:
    if label == pattern or label.startswith(pattern + " ") or label.endswith(" " + pattern):
        return True
    # Substring hit only counts when the caption adds a few qualifying words at most
    return pattern in label and (len(label) - len(pattern)) < LABEL_SLACK_CHARS

def match_label(raw) -> Optional[str]:
    """
    Classify a raw row caption.

    Args:
        raw: Caption cell value (any type, converted with str())

    Returns:
        Canonical metric key of the first matching registry entry, or None
    """
    label = normalize(raw)
    if not label:
        return None
    for entry in LABEL_REGISTRY:
        for pattern in entry.patterns:
            if _pattern_matches(label, pattern):
                logger.debug(f"Label {raw!r} -> {entry.key} (pattern {pattern!r})")
                return entry.key
    return None
