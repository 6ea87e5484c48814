#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for the DCF Model Extractor API (src/api/api.py) and the
workbook loader behind it (src/data/loader.py)

Uploads are built in memory with pandas (openpyxl for xlsx) and posted to
POST /extract through the FastAPI test client.
"""

import inspect
import io
import sys

sys.path.insert(0, ".")

import pandas as pd
import pytest
from fastapi.testclient import TestClient

import src.api.api as api_module
import src.data.loader as loader_module
from src.api.api import app
from src.data.loader import load_workbook, load_from_csv, WorkbookReadError

# ============================================================================
# Test Client Setup
# ============================================================================

client = TestClient(app)

# ============================================================================
# Test Data
# ============================================================================

DCF_GRID = [
    ["Acme Corp DCF", None, None, None],
    [None, 2023, 2024, 2025],
    ["Revenue", 100, 110, 121],
    ["COGS", 60, 65, 70],
    ["EBITDA", 25, 28, 31],
    ["Free Cash Flow", 20, 22, 24],
    ["WACC", 0.09, None, None],
    ["Terminal Growth", 0.025, None, None],
    ["Terminal Value", None, None, 400],
    ["Enterprise Value", 300, None, None],
]

RAW_GRID = [["row %d" % i, "lorem", "ipsum", i] for i in range(40)]

TITLED_CSV_TEXT = (
    "Acme Corp DCF\n"
    ",2023,2024,2025\n"
    "Revenue,100,110,121\n"
    "Free Cash Flow,20,22,24\n"
    "WACC,0.09,,\n"
    "Enterprise Value,300,,\n"
)

CSV_TEXT = (
    ",2023,2024,2025\n"
    "Revenue,100,110,121\n"
    "EBITDA,25,28,31\n"
    "Free Cash Flow,20,22,24\n"
    "Discount Rate,0.09,,\n"
    "Enterprise Value,300,,\n"
)

# ============================================================================
# Utility Functions
# ============================================================================


def print_header(title):
    """Print test header."""
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def build_xlsx(sheets):
    """Write {sheet name: grid} to xlsx bytes without header or index."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, grid in sheets.items():
            pd.DataFrame(grid).to_excel(writer, sheet_name=name, header=False, index=False)
    return buf.getvalue()


def post_file(file_name, content, content_type="application/octet-stream"):
    return client.post("/extract", files={"file": (file_name, content, content_type)})


# ============================================================================
# API Tests
# ============================================================================


def test_health_check():
    """Health check endpoint."""
    print_header("HEALTH CHECK")

    response = client.get("/health")
    assert response.status_code == 200, f"Expected 200, got {response.status_code}"

    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "DCF Model Extractor API"
    assert data["version"] == "1.0.0"


def test_extract_xlsx_picks_dcf_sheet():
    """Multi-sheet workbook: the DCF sheet wins over a larger raw data sheet."""
    print_header("EXTRACT - XLSX WORKBOOK")

    content = build_xlsx({"Raw Data": RAW_GRID, "DCF Output": DCF_GRID})
    response = post_file("acme.xlsx", content)
    assert response.status_code == 200, response.text

    data = response.json()
    model = data["model"]
    print(f"  Sheet: {model['sheet_name']}  Years: {model['years']}  IRR: {data['irr']}")

    assert data["file_name"] == "acme.xlsx"
    assert model["sheet_name"] == "DCF Output"
    assert model["years"] == [2023, 2024, 2025]
    assert model["series"]["revenue"] == [100, 110, 121]
    assert model["series"]["gross_profit"] == [40, 45, 51]
    assert model["scalars"]["wacc"] == pytest.approx(9.0)
    assert model["scalars"]["terminal_growth"] == pytest.approx(2.5)
    assert model["scalars"]["enterprise_value"] == 300
    assert model["scalars"]["equity_value"] == 300

    assert data["irr"] is not None
    assert data["cards"]["wacc"] == "9.0%"
    assert data["cards"]["enterprise_value"] == "$300.00"
    assert data["waterfall"][0] == {"label": "Revenue", "value": 121}

    grid = data["sensitivity"]
    assert grid is not None
    assert len(grid["cells"]) == 7 and len(grid["cells"][0]) == 5
    assert grid["latest_fcf"] == 24


def test_extract_csv():
    """Single-sheet CSV upload named after the file."""
    print_header("EXTRACT - CSV")

    response = post_file("model.csv", CSV_TEXT.encode("utf-8"), "text/csv")
    assert response.status_code == 200, response.text

    data = response.json()
    assert data["model"]["sheet_name"] == "model"
    assert data["model"]["series"]["fcf"] == [20, 22, 24]
    assert data["model"]["scalars"]["wacc"] == pytest.approx(9.0)
    assert "ebitda_margin" in data["model"]["series"]


def test_extract_csv_with_title_row():
    """A caption above the year row makes the first CSV line a single cell."""
    print_header("EXTRACT - CSV WITH TITLE ROW")

    response = post_file("acme.csv", TITLED_CSV_TEXT.encode("utf-8"), "text/csv")
    assert response.status_code == 200, response.text

    model = response.json()["model"]
    assert model["years"] == [2023, 2024, 2025]
    assert model["series"]["revenue"] == [100, 110, 121]
    assert model["scalars"]["enterprise_value"] == 300


def test_extract_accepts_xls_extension():
    """Legacy .xls uploads reach the reader; unreadable content is a 400, not a 415."""
    print_header("EXTRACT - XLS")

    response = post_file("legacy.xls", b"not really a BIFF workbook")
    assert response.status_code == 400
    assert response.json()["error_code"] == "HTTP_400"


def test_extract_runs_in_threadpool():
    """Parsing is blocking work, so the endpoint is a plain def that FastAPI runs off the event loop."""
    assert not inspect.iscoroutinefunction(api_module.extract)


def test_extract_unsupported_extension():
    """Unsupported file types are rejected with a structured 415."""
    print_header("EXTRACT - UNSUPPORTED FILE")

    response = post_file("notes.txt", b"Revenue,100,110")
    assert response.status_code == 415

    data = response.json()
    assert data["error_code"] == "HTTP_415"
    assert "notes.txt" in data["error_message"]
    assert "timestamp" in data


def test_extract_upload_too_large(monkeypatch):
    print_header("EXTRACT - UPLOAD TOO LARGE")

    monkeypatch.setattr(api_module, "MAX_UPLOAD_BYTES", 16)
    response = post_file("model.csv", CSV_TEXT.encode("utf-8"), "text/csv")
    assert response.status_code == 413
    assert response.json()["error_code"] == "HTTP_413"
    assert "exceeds the" in response.json()["error_message"]


def test_read_upload_stops_past_limit():
    stream = io.BytesIO(b"x" * 1000)
    content = api_module._read_upload(stream, 16)
    assert len(content) == 17
    assert stream.tell() == 17


def test_extract_without_model():
    """A readable file with nothing that looks like a DCF model is a 422."""
    print_header("EXTRACT - NO MODEL")

    response = post_file("notes.csv", b"hello,world\nfoo,bar\n", "text/csv")
    assert response.status_code == 422
    assert "No DCF model detected" in response.json()["error_message"]


def test_extract_empty_file():
    print_header("EXTRACT - EMPTY FILE")

    response = post_file("empty.xlsx", b"")
    assert response.status_code == 400
    assert response.json()["error_code"] == "HTTP_400"


def test_extract_corrupt_workbook():
    print_header("EXTRACT - CORRUPT WORKBOOK")

    response = post_file("broken.xlsx", b"this is not a zip archive")
    assert response.status_code == 400
    assert "Could not read file" in response.json()["error_message"]


def test_root_redirects_to_docs():
    response = client.get("/", follow_redirects=False)
    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/docs"


# ============================================================================
# Loader Tests
# ============================================================================


def test_load_workbook_from_path(tmp_path):
    path = tmp_path / "valuation.xlsx"
    path.write_bytes(build_xlsx({"Inputs": [["WACC", 0.1]], "Valuation": DCF_GRID}))

    wb = load_workbook(str(path))
    assert wb.sheet_names == ["Inputs", "Valuation"]
    assert wb.row_count("Valuation") == len(DCF_GRID)
    grid = wb.grid("Valuation")
    assert grid[0][1] is None
    assert grid[2][0] == "Revenue"


def test_load_csv_names_sheet_after_file(tmp_path):
    path = tmp_path / "forecast.csv"
    path.write_text(CSV_TEXT)

    wb = load_workbook(str(path))
    assert wb.sheet_names == ["forecast"]
    assert wb.grid("forecast")[1][0] == "Revenue"


def test_load_csv_keeps_blank_rows():
    wb = load_from_csv(b"a,1\n,\nb,2\n", sheet_name="S")
    assert wb.row_count("S") == 3
    assert wb.grid("S")[1] == [None, None]


def test_load_empty_csv():
    wb = load_from_csv(b"", sheet_name="S")
    assert wb.row_count("S") == 0


def test_load_workbook_rejects_unsupported_extension():
    with pytest.raises(WorkbookReadError, match="Unsupported file type"):
        load_workbook(b"data", filename="model.pdf")


def test_load_workbook_missing_file(tmp_path):
    with pytest.raises(WorkbookReadError, match="File not found"):
        load_workbook(str(tmp_path / "missing.xlsx"))


def test_load_csv_with_ragged_rows():
    wb = load_from_csv(TITLED_CSV_TEXT.encode("utf-8"), sheet_name="S")
    grid = wb.grid("S")
    assert wb.row_count("S") == 6
    assert grid[0] == ["Acme Corp DCF", None, None, None]
    assert grid[1][1:] == [2023, 2024, 2025]
    assert grid[4][0] == "WACC"


def test_load_csv_strips_byte_order_mark():
    wb = load_from_csv(b"\xef\xbb\xbfRevenue,1,2\n", sheet_name="S")
    assert wb.grid("S")[0][0] == "Revenue"


def test_load_workbook_reads_xls_with_xlrd(monkeypatch):
    """Legacy .xls goes through pandas with the xlrd engine."""
    calls = {}

    def fake_read_excel(buf, **kwargs):
        calls.update(kwargs)
        return {"DCF": pd.DataFrame([["Revenue", 100, 110]])}

    monkeypatch.setattr(loader_module.pd, "read_excel", fake_read_excel)
    wb = load_workbook(b"legacy bytes", filename="old_model.xls")

    assert calls["engine"] == "xlrd"
    assert calls["sheet_name"] is None and calls["header"] is None
    assert wb.sheet_names == ["DCF"]
    assert wb.grid("DCF")[0] == ["Revenue", 100, 110]


def test_load_workbook_reads_xlsx_with_openpyxl(monkeypatch):
    calls = {}

    def fake_read_excel(buf, **kwargs):
        calls.update(kwargs)
        return {}

    monkeypatch.setattr(loader_module.pd, "read_excel", fake_read_excel)
    load_workbook(b"bytes", filename="model.XLSX")
    assert calls["engine"] == "openpyxl"
