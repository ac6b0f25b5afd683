"""Scan orchestrator: pick a strategy, time it, and wrap the outcome in a ScanResult.

Failures never propagate out of :func:`scan`; they come back as a ScanResult
with ``success=False``. Cancellation is the exception: a cancelled scan raises
``asyncio.CancelledError`` and produces no result at all.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from smart_scan.client import api_client
from smart_scan.extraction.detectors import detect_items
from smart_scan.extraction.errors import BadInputError, ScanError
from smart_scan.extraction.models import ExtractedItem, ScanResult
from smart_scan.extraction.vision import VisionExtraction, extract_from_image
from smart_scan.scan_config import ScanConfig, ScanMode, SmartBackend

logger = logging.getLogger(__name__)

# (image_base64, mime_type) -> recognized text
TextRecognizer = Callable[[str, str | None], str]


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _succeeded(
    mode: ScanMode, started: float, items: list[ExtractedItem], raw_text: str | None
) -> ScanResult:
    elapsed = _elapsed_ms(started)
    logger.info("%s scan found %d items in %d ms", mode.value, len(items), elapsed)
    return ScanResult(
        success=True,
        mode=mode,
        items=items,
        raw_text=raw_text,
        processing_time=elapsed,
    )


def _failed(mode: ScanMode, started: float, exc: Exception, raw_text: str | None) -> ScanResult:
    if isinstance(exc, ScanError):
        logger.info("%s scan failed: %s", mode.value, exc.message)
        message = exc.message
    else:
        logger.exception("Unexpected %s scan failure", mode.value)
        message = str(exc) or "Scan failed"
    return ScanResult(
        success=False,
        mode=mode,
        raw_text=raw_text,
        error=message,
        processing_time=_elapsed_ms(started),
    )


def run_quick(text: str | None) -> list[ExtractedItem]:
    """Heuristic extraction over recognized text.

    Raises:
        BadInputError: the text is missing or blank.
    """
    if not text or not text.strip():
        raise BadInputError("No text found in image")
    return detect_items(text)


async def run_smart(
    image: str | None, mime_type: str | None, config: ScanConfig
) -> VisionExtraction:
    """Vision-model extraction, in-process or through the HTTP endpoint."""
    if config.smart_backend is SmartBackend.API:
        if not image:
            raise BadInputError("No image provided")
        return await api_client.scan_image(image, mime_type)
    return await extract_from_image(image, mime_type, provider=config.provider)


async def scan(
    mode: ScanMode | str,
    *,
    text: str | None = None,
    image: str | None = None,
    mime_type: str | None = None,
    recognizer: TextRecognizer | None = None,
    config: ScanConfig | None = None,
) -> ScanResult:
    """Run one scan and return its envelope.

    Args:
        mode: ``"quick"`` (heuristics over ``text``) or ``"smart"`` (vision model
            over ``image``).
        text: Recognized text for quick mode.
        image: Base64 image for smart mode, or for quick mode with a ``recognizer``.
        mime_type: MIME type of ``image``.
        recognizer: OCR callable used in quick mode when only an image is given.
        config: Provider/backend selection for smart mode.

    Returns:
        A ScanResult; ``success=False`` with ``error`` set on any failure.
    """
    started = time.perf_counter()
    config = config or ScanConfig()
    try:
        mode = ScanMode(mode)
    except ValueError:
        logger.info("Rejected unknown scan mode %r", mode)
        return ScanResult(
            success=False,
            mode=None,
            error=f"Unknown scan mode: {mode}; no scan was run",
            processing_time=_elapsed_ms(started),
        )

    raw_text: str | None = None
    try:
        if mode is ScanMode.QUICK:
            if text is None and image and recognizer is not None:
                text = await asyncio.to_thread(recognizer, image, mime_type)
            raw_text = text
            items = run_quick(text)
        else:
            extraction = await run_smart(image, mime_type, config)
            items, raw_text = extraction.items, extraction.raw_text
    except Exception as exc:
        return _failed(mode, started, exc, raw_text)
    return _succeeded(mode, started, items, raw_text)


def scan_text(text: str | None) -> ScanResult:
    """Synchronous quick scan over recognized text."""
    started = time.perf_counter()
    try:
        items = run_quick(text)
    except Exception as exc:
        return _failed(ScanMode.QUICK, started, exc, text)
    return _succeeded(ScanMode.QUICK, started, items, text)
