"""Scan endpoints: vision extraction and the orchestrated scan envelope."""

from __future__ import annotations

from fastapi import APIRouter

from smart_scan.api.models import ErrorResponse, ScanImageRequest, ScanImageResponse, ScanRequest
from smart_scan.extraction.models import ScanResult
from smart_scan.extraction.vision import extract_from_image
from smart_scan.scanning.pipeline import scan

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status: {"model": ErrorResponse} for status in (400, 405, 500, 501, 502)
}


@router.post(
    "/api/scan-image",
    response_model=ScanImageResponse,
    responses=_ERROR_RESPONSES,
)
async def scan_image(body: ScanImageRequest) -> ScanImageResponse:
    """Extract items from an image with the configured vision model.

    Failures surface as ScanError subclasses; the app's exception handler turns
    them into ``{"error": ...}`` with the matching status code.
    """
    extraction = await extract_from_image(body.image, body.mime_type)
    return ScanImageResponse(items=extraction.items, raw_text=extraction.raw_text)


@router.post("/api/scan", response_model=ScanResult, responses={400: {"model": ErrorResponse}})
async def run_scan(body: ScanRequest) -> ScanResult:
    """Run a quick or smart scan and return the ScanResult envelope.

    Always 200: extraction failures are reported in the envelope's ``error``.
    """
    return await scan(body.mode, text=body.text, image=body.image, mime_type=body.mime_type)
