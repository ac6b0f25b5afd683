"""Shared fixtures: a tiny image payload and an API client."""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from smart_scan.api.main import app


@pytest.fixture
def image_b64() -> str:
    return base64.b64encode(b"\x89PNG\r\n\x1a\nnot really a png").decode("ascii")


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
