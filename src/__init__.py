"""DCF Model Extractor - Modular Architecture

Modules:
  - src.parser: sheet selection, label matching, year and row extraction
  - src.dcf: metric derivation, IRR and sensitivity analytics
  - src.data: workbook loading and cell preparation
  - src.utils: Configuration and logging
  - src.api: FastAPI upload service
"""

from . import dcf, data, parser, utils

__all__ = ["dcf", "data", "parser", "utils"]
