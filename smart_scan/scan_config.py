"""Scan configuration: mode/provider enums and the ScanConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ScanMode(StrEnum):
    """Extraction strategies a scan can run."""

    QUICK = "quick"  # local heuristics over recognized text
    SMART = "smart"  # remote vision model over the raw image


class VisionProvider(StrEnum):
    """Hosted vision-language model providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class SmartBackend(StrEnum):
    """Where a smart scan sends the image."""

    DIRECT = "direct"  # call the provider SDK in-process
    API = "api"  # post to the /api/scan-image endpoint


@dataclass(frozen=True)
class ScanConfig:
    """Immutable per-scan configuration.

    ``provider=None`` defers to ``settings.vision_provider``.
    """

    provider: VisionProvider | None = None
    smart_backend: SmartBackend = SmartBackend.DIRECT
