"""Tests for the scan orchestrator (no external APIs required)."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from samples import BIRTHDAY_GIFT_TEXT

from smart_scan.extraction.errors import ConfigurationError, UpstreamError
from smart_scan.extraction.models import TodoItem
from smart_scan.extraction.vision import VisionExtraction
from smart_scan.scan_config import ScanConfig, ScanMode, SmartBackend
from smart_scan.scanning.pipeline import run_smart, scan, scan_text


def _run(coro):
    return asyncio.run(coro)


class TestQuickScan:
    def test_birthday_and_gift_card(self) -> None:
        result = _run(scan("quick", text=BIRTHDAY_GIFT_TEXT))
        assert result.success is True
        assert result.mode is ScanMode.QUICK
        assert result.error is None
        assert result.raw_text == BIRTHDAY_GIFT_TEXT
        assert result.processing_time >= 0

        kinds = {item.type: item for item in result.items}
        assert set(kinds) == {"birthday", "gift-card"}
        assert kinds["birthday"].data.person_name == "John"
        assert kinds["birthday"].suggested_destination == "event"
        assert kinds["gift-card"].data.brand == "Starbucks"
        assert kinds["gift-card"].data.amount == 25.0
        assert kinds["gift-card"].suggested_destination == "gift-card"

    def test_nothing_found_is_success(self) -> None:
        result = _run(scan(ScanMode.QUICK, text="The quick brown fox jumps over the lazy dog"))
        assert result.success is True
        assert result.items == []

    @pytest.mark.parametrize("text", [None, "", "  \n\t "])
    def test_blank_text_fails(self, text: str | None) -> None:
        result = _run(scan("quick", text=text))
        assert result.success is False
        assert result.error == "No text found in image"
        assert result.items == []

    def test_recognizer_supplies_text(self, image_b64: str) -> None:
        recognizer = MagicMock(return_value="- Call the plumber")
        result = _run(scan("quick", image=image_b64, mime_type="image/png", recognizer=recognizer))
        recognizer.assert_called_once_with(image_b64, "image/png")
        assert result.success is True
        assert result.raw_text == "- Call the plumber"
        assert [item.title for item in result.items] == ["Call the plumber"]

    def test_recognizer_failure_is_reported(self, image_b64: str) -> None:
        recognizer = MagicMock(side_effect=RuntimeError("OCR engine crashed"))
        result = _run(scan("quick", image=image_b64, recognizer=recognizer))
        assert result.success is False
        assert result.error == "OCR engine crashed"

    def test_scan_text_is_synchronous(self) -> None:
        result = scan_text("- Buy milk\n- Buy eggs")
        assert result.success is True
        assert [item.title for item in result.items] == ["Buy milk", "Buy eggs"]


def test_unknown_mode() -> None:
    result = _run(scan("deep", text="hello"))
    assert result.success is False
    assert result.mode is None
    assert result.error == "Unknown scan mode: deep; no scan was run"
    assert result.items == []


class TestSmartScan:
    @patch("smart_scan.scanning.pipeline.extract_from_image")
    def test_success(self, mock_extract: MagicMock, image_b64: str) -> None:
        item = TodoItem(confidence=0.9, title="Book dentist")
        mock_extract.return_value = VisionExtraction(items=[item], raw_text="[...]")

        result = _run(scan("smart", image=image_b64, mime_type="image/png"))

        mock_extract.assert_called_once_with(image_b64, "image/png", provider=None)
        assert result.success is True
        assert result.mode is ScanMode.SMART
        assert result.items == [item]
        assert result.raw_text == "[...]"

    @patch("smart_scan.scanning.pipeline.extract_from_image")
    def test_scan_error_becomes_failed_result(self, mock_extract: MagicMock) -> None:
        mock_extract.side_effect = ConfigurationError("OpenAI API key not configured")
        result = _run(scan("smart", image="abc"))
        assert result.success is False
        assert result.mode is ScanMode.SMART
        assert result.error == "OpenAI API key not configured"
        assert result.items == []

    @patch("smart_scan.scanning.pipeline.extract_from_image")
    def test_unexpected_error_becomes_failed_result(self, mock_extract: MagicMock) -> None:
        mock_extract.side_effect = RuntimeError("boom")
        result = _run(scan("smart", image="abc"))
        assert result.success is False
        assert result.error == "boom"

    @patch("smart_scan.scanning.pipeline.extract_from_image")
    def test_provider_is_forwarded(self, mock_extract: MagicMock) -> None:
        mock_extract.return_value = VisionExtraction(items=[], raw_text="[]")
        _run(run_smart("abc", None, ScanConfig(provider="anthropic")))
        mock_extract.assert_called_once_with("abc", None, provider="anthropic")

    @patch("smart_scan.client.api_client.scan_image")
    def test_api_backend(self, mock_scan_image: MagicMock) -> None:
        mock_scan_image.return_value = VisionExtraction(items=[], raw_text="[]")
        config = ScanConfig(smart_backend=SmartBackend.API)
        result = _run(scan("smart", image="abc", mime_type="image/png", config=config))
        mock_scan_image.assert_called_once_with("abc", "image/png")
        assert result.success is True

    @patch("smart_scan.client.api_client.scan_image")
    def test_api_backend_requires_image(self, mock_scan_image: MagicMock) -> None:
        config = ScanConfig(smart_backend=SmartBackend.API)
        result = _run(scan("smart", config=config))
        mock_scan_image.assert_not_called()
        assert result.success is False
        assert result.error == "No image provided"

    @patch("smart_scan.client.api_client.scan_image")
    def test_api_backend_failure(self, mock_scan_image: MagicMock) -> None:
        mock_scan_image.side_effect = UpstreamError("Scan request failed")
        config = ScanConfig(smart_backend=SmartBackend.API)
        result = _run(scan("smart", image="abc", config=config))
        assert result.success is False
        assert result.error == "Scan request failed"


@patch("smart_scan.extraction.vision.AsyncOpenAI")
@patch("smart_scan.extraction.vision.settings")
def test_cancellation_aborts_upstream_request(
    mock_settings: MagicMock, mock_openai_cls: MagicMock, image_b64: str
) -> None:
    mock_settings.vision_provider = "openai"
    mock_settings.openai_api_key = "sk-test"
    outcomes: list[str] = []

    async def cancel_mid_scan() -> None:
        started = asyncio.Event()

        async def slow_create(**kwargs):
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                outcomes.append("cancelled")
                raise
            outcomes.append("completed")

        mock_openai_cls.return_value.chat.completions.create = slow_create
        task = asyncio.create_task(scan("smart", image=image_b64))
        await asyncio.wait_for(started.wait(), timeout=5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    _run(cancel_mid_scan())
    assert outcomes == ["cancelled"]
