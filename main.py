#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Interactive DCF model extractor — spreadsheet in, dashboard numbers out.

Steps:
- Load every sheet of the workbook (xlsx/xlsm/xls/csv)
- Prefer sheets named dcf/model/valuation/output/summary/forecast, then try the rest
- Detect the year row, classify labeled rows as series or scalars, keep the best sheet
- Derive missing metrics (gross profit, EBITDA/EBIT, margins, PV split, ...)
- IRR: rate r with  -EV + Σ FCF_t / (1+r)^t (+ TV in the final year) = 0
- Sensitivity: EV over WACC ± 2pp and terminal growth ± 1pp via
    EV = FCF·(1+g)/(WACC−g)  or  base EV × Gordon-multiple ratio
"""

import sys
from typing import Optional

import pandas as pd

from src.data.loader import load_workbook, WorkbookReadError
from src.dcf.analytics import irr_for_model, sensitivity_for_model
from src.dcf.dashboard import format_value, growth_rates, summary_cards, valuation_breakdown, waterfall
from src.parser.sheets import extract_best

# ----------------------------- prompt helpers -----------------------------
def prompt_str(msg: str, default: Optional[str] = None) -> str:
    try:
        s = input(f"{msg}{' [' + default + ']' if default is not None else ''}: ").strip()
    except EOFError:
        s = ""
    return s if s else (default or "")

def series_frame(model) -> pd.DataFrame:
    """Series as a metric x year table."""
    data = {str(y): [model.series[k][i] for k in model.series] for i, y in enumerate(model.years)}
    return pd.DataFrame(data, index=list(model.series))

def sensitivity_frame(grid) -> pd.DataFrame:
    """Sensitivity grid with formatted EVs; rows WACC, columns terminal growth."""
    return pd.DataFrame(
        [[format_value(v) for v in row] for row in grid.cells],
        index=[f"{w:.1f}%" for w in grid.wacc_values],
        columns=[f"{g:.1f}%" for g in grid.growth_values],
    )

# ----------------------------- main -----------------------------
def main():
    print("\n=== DCF Model Extractor — best sheet, derived metrics, IRR & sensitivity ===")
    path = sys.argv[1] if len(sys.argv) > 1 else prompt_str("Path to workbook (.xlsx/.xlsm/.xls/.csv)")
    if not path:
        print("No file given.")
        sys.exit(1)

    try:
        wb = load_workbook(path)
    except WorkbookReadError as e:
        print(f"Could not read workbook: {e}")
        sys.exit(1)

    model = extract_best(wb)
    if model is None:
        print("No DCF model detected. Check that the workbook has labeled rows and year columns.")
        sys.exit(1)

    print("\n--- Source ---")
    print(f"Sheet: {model.sheet_name}")
    print(f"Years: {', '.join(str(y) for y in model.years) or '(none)'}")
    if model.conflicts:
        print(f"Note: duplicate rows for {', '.join(model.conflicts)}; the last row was used.")

    if model.series:
        print("\nSeries:")
        print(series_frame(model).to_string(float_format=lambda x: f"{x:,.2f}", na_rep="--"))

    if model.scalars:
        print("\nScalars:")
        for k, v in model.scalars.items():
            print(f"  {k:<20} {v:,.4f}")

    irr = irr_for_model(model)
    print("\n--- Summary ---")
    for name, text in summary_cards(model, irr).items():
        print(f"  {name.replace('_', ' ').title():<18} {text}")

    growth = growth_rates(model)
    if growth:
        print("\nGrowth (% YoY):")
        for k, vals in growth.items():
            print(f"  {k:<12} " + "  ".join(format_value(v, pct=True) for v in vals))

    steps = waterfall(model)
    if steps:
        print(f"\nWaterfall ({model.years[-1]}): " + " -> ".join(f"{label} {format_value(v)}" for label, v in steps))

    breakdown = valuation_breakdown(model)
    if breakdown:
        print("\nEV breakdown: " + ", ".join(
            f"{k} {format_value(breakdown[k])} ({breakdown[k + '_pct']:.1f}%)"
            for k in ("pv_fcf", "pv_terminal") if k in breakdown and k + "_pct" in breakdown
        ))

    grid = sensitivity_for_model(model)
    if grid is not None:
        print("\nSensitivity (EV; rows WACC, columns terminal growth):")
        print(sensitivity_frame(grid).to_string())

    save = prompt_str("\nSave extracted series to CSV? (y/n)", "n").lower() in ("y", "yes", "1")
    if save and model.series:
        outp = prompt_str("Output CSV path", "dcf_series_output.csv")
        series_frame(model).to_csv(outp)
        print(f"Saved: {outp}")

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
