#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FastAPI service for extracting a DCF dashboard from an uploaded spreadsheet.

Endpoint:
  POST /extract  (multipart form field "file": .xlsx, .xlsm, .xls or .csv)

Behavior:
  - Read the upload into memory (nothing is stored)
  - Load every sheet, pick the best-scoring model, derive missing metrics
  - Return the model with IRR, summary cards, chart data and sensitivity grid
  - Structured error responses for unsupported, oversized or model-less files
"""

import os
from datetime import date
from typing import Dict, List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from src.data.loader import load_workbook, WorkbookReadError
from src.dcf.dashboard import build_dashboard
from src.parser.sheets import extract_best
from src.utils.logger import get_logger
from src.utils.config import MAX_UPLOAD_BYTES, MAX_UPLOAD_MB, SUPPORTED_EXTENSIONS, API_HOST, API_PORT, API_RELOAD

logger = get_logger(__name__)

SERVICE_NAME = "DCF Model Extractor API"
SERVICE_VERSION = "1.0.0"

# ============================================================================
# FastAPI App Setup
# ============================================================================

app = FastAPI(
    title=SERVICE_NAME,
    description="Upload a spreadsheet DCF model and get back the extracted series, valuation scalars, IRR and sensitivity grid",
    version=SERVICE_VERSION,
)


# ============================================================================
# Pydantic Models
# ============================================================================


class ExtractedModelResponse(BaseModel):
    """Series and scalars extracted from the chosen sheet."""

    sheet_name: Optional[str] = None
    years: List[int]
    series: Dict[str, List[Optional[float]]]
    scalars: Dict[str, float]
    conflicts: List[str] = Field(default_factory=list, description="Keys written by more than one row")


class WaterfallStep(BaseModel):
    label: str
    value: float


class SensitivityResponse(BaseModel):
    """Enterprise value by WACC (rows) and terminal growth (columns)."""

    base_wacc: float
    base_growth: float
    base_enterprise_value: Optional[float] = None
    latest_fcf: Optional[float] = None
    wacc_values: List[float]
    growth_values: List[float]
    cells: List[List[Optional[float]]]


class ExtractResponse(BaseModel):
    """Complete dashboard payload for one uploaded file."""

    file_name: str
    extracted_on: date = Field(default_factory=date.today)
    model: ExtractedModelResponse
    irr: Optional[float] = Field(None, description="IRR estimate in percent")
    cards: Dict[str, str]
    growth: Dict[str, List[Optional[float]]]
    waterfall: List[WaterfallStep]
    valuation_breakdown: Dict[str, float]
    sensitivity: Optional[SensitivityResponse] = None


class ErrorDetail(BaseModel):
    """Error response detail."""

    error_code: str
    error_message: str
    field: Optional[str] = None
    timestamp: str = Field(default_factory=lambda: date.today().isoformat())


# ============================================================================
# Custom Exceptions
# ============================================================================


class UnsupportedFileException(Exception):
    """Raised when the upload has an unsupported extension."""

    pass


class UploadTooLargeException(Exception):
    """Raised when the upload exceeds MAX_UPLOAD_BYTES."""

    pass


class ModelNotFoundException(Exception):
    """Raised when no sheet yields a usable DCF model."""

    pass


# ============================================================================
# Helper Functions
# ============================================================================


def _read_upload(stream, limit: int) -> bytes:
    """Read at most limit + 1 bytes, enough to tell whether the upload is over the limit."""
    return stream.read(limit + 1)


def _validate_upload(file_name: str, content: bytes) -> None:
    """
    Check extension and size of an uploaded file.

    Raises:
        UnsupportedFileException: If the extension is not supported
        UploadTooLargeException: If the file is too large
    """
    ext = os.path.splitext(file_name or "")[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileException(
            f"'{file_name}' is not a supported spreadsheet ({', '.join(SUPPORTED_EXTENSIONS)})"
        )
    if len(content) > MAX_UPLOAD_BYTES:
        raise UploadTooLargeException(
            f"'{file_name}' exceeds the {MAX_UPLOAD_MB:g} MB limit"
        )
    if not content:
        raise WorkbookReadError(f"'{file_name}' is empty")


def _extract_dashboard(file_name: str, content: bytes) -> ExtractResponse:
    """
    Run the full extraction pipeline on an in-memory file.

    Raises:
        WorkbookReadError: If the file cannot be parsed as a spreadsheet
        ModelNotFoundException: If no sheet yields a model
    """
    logger.info(f"Extracting model from '{file_name}' ({len(content):,} bytes)")

    workbook = load_workbook(content, filename=file_name)
    model = extract_best(workbook)
    if model is None:
        raise ModelNotFoundException(
            "No DCF model detected. Make sure the workbook has labeled rows "
            "(e.g. Revenue, EBITDA, FCF, WACC) and year columns."
        )

    dashboard = build_dashboard(model)
    response = ExtractResponse(file_name=file_name, **dashboard)

    logger.info(
        f"Model from sheet '{model.sheet_name}': {len(model.years)} years, "
        f"{len(model.series)} series, {len(model.scalars)} scalars, IRR={response.irr}"
    )
    return response


# ============================================================================
# API Endpoints
# ============================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    logger.info("Health check requested")
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@app.post(
    "/extract",
    response_model=ExtractResponse,
    tags=["Extraction"],
    summary="Extract a DCF dashboard from a spreadsheet",
    responses={
        200: {"description": "Model extracted"},
        400: {"description": "File could not be read"},
        413: {"description": "File too large"},
        415: {"description": "Unsupported file type"},
        422: {"description": "No DCF model detected"},
        500: {"description": "Internal server error"},
    },
)
def extract(file: UploadFile = File(..., description="Spreadsheet containing a DCF model")):
    """
    Extract revenue, margins, cash flows and valuation scalars from a spreadsheet.

    **Returns:**
    - The extracted model (years, series, scalars) with derived metrics
    - IRR estimate and formatted summary cards
    - Growth rates, waterfall steps and EV breakdown for charts
    - WACC x terminal growth sensitivity grid

    **Errors:**
    - 400: Unreadable or empty file
    - 413: File larger than the upload limit
    - 415: Unsupported extension
    - 422: No DCF model detected in any sheet
    """
    file_name = file.filename or "upload"
    logger.info(f"=== EXTRACT REQUEST: {file_name} ===")

    try:
        content = _read_upload(file.file, MAX_UPLOAD_BYTES)
        _validate_upload(file_name, content)
        response = _extract_dashboard(file_name, content)
        logger.info(f"✓ Extraction completed for {file_name}")
        return response

    except UnsupportedFileException as e:
        logger.error(f"Unsupported file: {str(e)}")
        raise HTTPException(status_code=415, detail=f"Unsupported file: {str(e)}")

    except UploadTooLargeException as e:
        logger.error(f"Upload too large: {str(e)}")
        raise HTTPException(status_code=413, detail=f"Upload too large: {str(e)}")

    except ModelNotFoundException as e:
        logger.warning(f"No model found in {file_name}")
        raise HTTPException(status_code=422, detail=str(e))

    except WorkbookReadError as e:
        logger.error(f"Unreadable workbook: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Could not read file: {str(e)}")

    except Exception as e:
        logger.error(f"Unexpected error: {type(e).__name__}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {type(e).__name__}",
        )


@app.get("/", include_in_schema=False)
def root():
    """Redirect to docs."""
    return RedirectResponse("/docs")


# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with structured response."""
    logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            ErrorDetail(
                error_code=f"HTTP_{exc.status_code}",
                error_message=str(exc.detail),
            )
        ),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle unexpected exceptions with structured response."""
    logger.error(f"Unhandled exception: {type(exc).__name__}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=jsonable_encoder(
            ErrorDetail(
                error_code="INTERNAL_ERROR",
                error_message=f"Internal server error: {type(exc).__name__}",
            )
        ),
    )


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting {SERVICE_NAME} on {API_HOST}:{API_PORT}...")
    uvicorn.run("src.api.api:app", host=API_HOST, port=API_PORT, reload=API_RELOAD)
