"""HTTP client for the /api/scan-image extraction endpoint."""

from __future__ import annotations

import httpx

from smart_scan.config import settings
from smart_scan.extraction.errors import UpstreamError, error_for_status
from smart_scan.extraction.models import extracted_item_adapter
from smart_scan.extraction.vision import VisionExtraction


def check_health(api_url: str | None = None) -> bool:
    """Return True if the API server responds to /health."""
    try:
        r = httpx.get(f"{api_url or settings.scan_api_url}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.ConnectError:
        return False


async def scan_image(
    image: str,
    mime_type: str | None = None,
    api_url: str | None = None,
    timeout: float | None = None,
) -> VisionExtraction:
    """Post an image to the extraction endpoint and return its items.

    Cancelling the caller closes the request. Error responses are mapped back
    to the matching ScanError subclass by status code; transport failures
    become UpstreamError.
    """
    payload: dict[str, str] = {"image": image}
    if mime_type:
        payload["mimeType"] = mime_type
    async with httpx.AsyncClient(timeout=timeout or settings.scan_api_timeout) as client:
        try:
            r = await client.post(
                f"{api_url or settings.scan_api_url}/api/scan-image", json=payload
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Scan request failed: {e}") from e

    if r.is_error:
        try:
            body = r.json()
        except ValueError:
            body = None
        message = body.get("error") if isinstance(body, dict) else None
        raise error_for_status(
            r.status_code, message or f"Scan request failed with status {r.status_code}"
        )

    body = r.json()
    items = [extracted_item_adapter.validate_python(item) for item in body.get("items", [])]
    return VisionExtraction(items=items, raw_text=body.get("rawText", ""))
