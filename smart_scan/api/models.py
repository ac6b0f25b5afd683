"""Pydantic request/response schemas for the scan API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from smart_scan.extraction.models import ExtractedItem
from smart_scan.scan_config import ScanMode


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanImageRequest(_CamelModel):
    """Request body for the /api/scan-image endpoint.

    ``image`` is optional at the schema level so a missing image is reported
    as a 400 ``{"error": ...}`` rather than a validation error.
    """

    image: str | None = None
    mime_type: str | None = None


class ScanImageResponse(_CamelModel):
    """Response body for the /api/scan-image endpoint."""

    items: list[ExtractedItem] = Field(default_factory=list)
    raw_text: str = ""


class ScanRequest(_CamelModel):
    """Request body for the /api/scan endpoint."""

    mode: ScanMode
    text: str | None = None
    image: str | None = None
    mime_type: str | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
