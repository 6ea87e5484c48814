#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration module: centralize all environment variables and defaults.
Supports easy overrides without modifying code.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# ========== EXTRACTION DEFAULTS ==========
YEAR_MIN = 2000
YEAR_MAX = 2050
YEAR_SCAN_ROWS = int(os.getenv("YEAR_SCAN_ROWS", "20"))  # Rows searched for numeric years
YEAR_FALLBACK_SCAN_ROWS = int(os.getenv("YEAR_FALLBACK_SCAN_ROWS", "10"))  # Rows searched for "FY2025"-style headers
MIN_YEAR_COLUMNS = 2

# Label may exceed a contained pattern by fewer than this many characters
LABEL_SLACK_CHARS = 10

# Sheet names tried in this order before falling back to the longest sheet
PREFERRED_SHEET_KEYWORDS = ["dcf", "model", "valuation", "output", "summary", "forecast"]

# Best candidate score below this means "no model detected"
MIN_MODEL_SCORE = int(os.getenv("MIN_MODEL_SCORE", "4"))

# ========== VALUATION ANALYTICS ==========
IRR_INITIAL_RATE = 0.10
IRR_MAX_ITER = int(os.getenv("IRR_MAX_ITER", "100"))
IRR_DERIVATIVE_EPS = 1e-10
IRR_STEP_TOL = 1e-7
IRR_MIN_RATE = -0.99
IRR_MAX_RATE = 10.0

# Percentage-point offsets around the base case
SENSITIVITY_WACC_OFFSETS = [-2.0, -1.0, -0.5, 0.0, 0.5, 1.0, 2.0]
SENSITIVITY_GROWTH_OFFSETS = [-1.0, -0.5, 0.0, 0.5, 1.0]

# ========== FILE INPUT ==========
SUPPORTED_EXTENSIONS = [".xlsx", ".xlsm", ".xls", ".csv"]
MAX_UPLOAD_MB = float(os.getenv("MAX_UPLOAD_MB", "10"))
MAX_UPLOAD_BYTES = int(MAX_UPLOAD_MB * 1024 * 1024)

# ========== LOGGING CONFIGURATION ==========
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s [%(levelname)s] %(name)s: %(message)s")

# ========== API CONFIGURATION ==========
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_RELOAD = os.getenv("API_RELOAD", "False").lower() == "true"

if __name__ == "__main__":
    print("=" * 60)
    print("Configuration Summary")
    print("=" * 60)
    print(f"Year window: {YEAR_MIN}-{YEAR_MAX} (scan {YEAR_SCAN_ROWS} rows, fallback {YEAR_FALLBACK_SCAN_ROWS})")
    print(f"Preferred sheets: {', '.join(PREFERRED_SHEET_KEYWORDS)}")
    print(f"Minimum model score: {MIN_MODEL_SCORE}")
    print(f"IRR max iterations: {IRR_MAX_ITER}")
    print(f"Max upload: {MAX_UPLOAD_MB} MB")
    print(f"Log Level: {LOG_LEVEL}")
    print(f"API: {API_HOST}:{API_PORT}")
    print("=" * 60)
