"""Tests for ScanConfig, scan enums, settings, and the error taxonomy."""

from __future__ import annotations

import dataclasses

import pytest

from smart_scan.config import Settings
from smart_scan.extraction.errors import (
    BadInputError,
    ConfigurationError,
    ParseError,
    ScanError,
    UpstreamError,
    error_for_status,
)
from smart_scan.scan_config import ScanConfig, ScanMode, SmartBackend, VisionProvider

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestScanMode:
    def test_values(self) -> None:
        assert ScanMode.QUICK.value == "quick"
        assert ScanMode.SMART.value == "smart"

    def test_from_string(self) -> None:
        assert ScanMode("quick") is ScanMode.QUICK
        assert ScanMode("smart") is ScanMode.SMART

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            ScanMode("deep")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(ScanMode.QUICK, str)


class TestVisionProvider:
    def test_values(self) -> None:
        assert VisionProvider.OPENAI.value == "openai"
        assert VisionProvider.ANTHROPIC.value == "anthropic"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            VisionProvider("gemini")


# ---------------------------------------------------------------------------
# ScanConfig tests
# ---------------------------------------------------------------------------


class TestScanConfig:
    def test_defaults(self) -> None:
        config = ScanConfig()
        assert config.provider is None
        assert config.smart_backend is SmartBackend.DIRECT

    def test_custom(self) -> None:
        config = ScanConfig(provider=VisionProvider.ANTHROPIC, smart_backend=SmartBackend.API)
        assert config.provider is VisionProvider.ANTHROPIC
        assert config.smart_backend is SmartBackend.API

    def test_frozen(self) -> None:
        config = ScanConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.smart_backend = SmartBackend.API  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Settings tests
# ---------------------------------------------------------------------------


class TestSettings:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISION_PROVIDER", "anthropic")
        monkeypatch.setenv("VISION_MAX_TOKENS", "250")
        s = Settings(_env_file=None)
        assert s.vision_provider == "anthropic"
        assert s.vision_max_tokens == 250

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("VISION_PROVIDER", "DEFAULT_CURRENCY", "OPENAI_VISION_MODEL"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.vision_provider == "openai"
        assert s.default_currency == "USD"
        assert s.openai_vision_model == "gpt-4o"


# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize(
        ("error_cls", "status_code"),
        [(ConfigurationError, 501), (BadInputError, 400), (UpstreamError, 502), (ParseError, 500)],
    )
    def test_status_codes(self, error_cls: type[ScanError], status_code: int) -> None:
        exc = error_cls("message")
        assert isinstance(exc, ScanError)
        assert exc.status_code == status_code
        assert exc.message == "message"
        assert str(exc) == "message"

    @pytest.mark.parametrize(
        ("status_code", "error_cls"),
        [(400, BadInputError), (500, ParseError), (501, ConfigurationError), (504, UpstreamError)],
    )
    def test_error_for_status(self, status_code: int, error_cls: type[ScanError]) -> None:
        exc = error_for_status(status_code, "boom")
        assert type(exc) is error_cls
        assert exc.message == "boom"
