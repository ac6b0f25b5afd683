"""Vision-model extraction: send an image to a hosted model and parse its JSON reply."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import anthropic
import openai
from anthropic import AsyncAnthropic
from anthropic.types import TextBlock
from openai import AsyncOpenAI
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from smart_scan.config import settings
from smart_scan.extraction.errors import (
    BadInputError,
    ConfigurationError,
    ParseError,
    UpstreamError,
)
from smart_scan.extraction.kinds import ItemKind
from smart_scan.extraction.models import ExtractedItem, build_item
from smart_scan.scan_config import VisionProvider

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_CONFIDENCE = 0.8

EXTRACTION_PROMPT = """\
Analyze this image and extract structured information. Identify what type of \
document/image this is and extract relevant data.

Possible types:
- birthday: birthday card (data: personName, date as YYYY-MM-DD, age, message, recurring)
- invitation: invitation (data: eventName, date, time as HH:MM, location, host, rsvpInfo)
- todo: handwritten TODO list (data: items as a list of strings, priority, dueDate)
- receipt: receipt (data: merchant, amount, currency, date, items as [{name, price}], category)
- gift-card: gift card (data: brand, amount, currency, code, pin, expiryDate)
- meeting-notes: meeting notes (data: meetingTitle, date, attendees, actionItems, notes)
- workout-plan: workout plan (data: goalName, targetValue, targetUnit, startDate, endDate, exercises)
- prescription: prescription (data: medicineName, dosage, frequency, prescribedBy, date, refills, warnings)

Return a JSON array of objects with this structure:
{
  "type": "birthday|invitation|todo|receipt|gift-card|meeting-notes|workout-plan|prescription",
  "confidence": 0.0-1.0,
  "title": "Short title",
  "description": "Brief description",
  "data": { ...type-specific fields... }
}

If multiple items are found (e.g., a birthday AND a task to buy a gift), return multiple objects.
If nothing relevant is found, return an empty array.

IMPORTANT: Return ONLY a valid JSON array, no markdown fencing, no explanations."""

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,", re.IGNORECASE)
_CODE_FENCE = re.compile(r"```(?:json)?[ \t]*\n?|\n?```", re.IGNORECASE)


@dataclass
class VisionExtraction:
    """Items parsed from a model reply, plus the reply text for diagnostics."""

    items: list[ExtractedItem]
    raw_text: str


# ---------------------------------------------------------------------------
# Request shaping
# ---------------------------------------------------------------------------


def normalize_image(image: str | None, mime_type: str | None = None) -> tuple[str, str]:
    """Validate an image payload and return ``(base64_data, mime_type)``.

    Accepts raw base64 or a ``data:<mime>;base64,`` URL; the URL's MIME type is
    used when ``mime_type`` is not given.

    Raises:
        BadInputError: missing image, non-image MIME type, or invalid base64.
    """
    if not image or not image.strip():
        raise BadInputError("No image provided")

    data = image.strip()
    match = _DATA_URL.match(data)
    if match:
        data = data[match.end() :]
        mime_type = mime_type or match.group("mime")
    data = "".join(data.split())
    mime_type = (mime_type or DEFAULT_MIME_TYPE).lower()

    if not mime_type.startswith("image/"):
        raise BadInputError(f"Unsupported MIME type: {mime_type}")
    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadInputError("Image payload is not valid base64") from exc

    return data, mime_type


def _resolve_provider(provider: VisionProvider | str | None) -> VisionProvider:
    name = provider or settings.vision_provider
    try:
        return VisionProvider(name)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown vision provider: {name}") from exc


def _require_api_key(provider: VisionProvider) -> str:
    if provider is VisionProvider.ANTHROPIC:
        key, name = settings.anthropic_api_key, "Anthropic"
    else:
        key, name = settings.openai_api_key, "OpenAI"
    if not key:
        raise ConfigurationError(f"{name} API key not configured")
    return key


async def _call_openai(api_key: str, image: str, mime_type: str) -> str:
    client = AsyncOpenAI(api_key=api_key)
    try:
        response = await client.chat.completions.create(
            model=settings.openai_vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image}"},
                        },
                    ],
                }
            ],
            max_tokens=settings.vision_max_tokens,
            temperature=settings.vision_temperature,
        )
    except openai.APIStatusError as exc:
        logger.error("OpenAI vision request failed (%s): %s", exc.status_code, exc.message)
        raise UpstreamError(f"Vision API request failed: {exc.message}") from exc
    except openai.APIError as exc:
        logger.error("OpenAI vision request failed: %s", exc)
        raise UpstreamError(f"Vision API request failed: {exc}") from exc

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise UpstreamError("No response from vision model")
    return content


async def _call_anthropic(api_key: str, image: str, mime_type: str) -> str:
    client = AsyncAnthropic(api_key=api_key)
    try:
        response = await client.messages.create(
            model=settings.anthropic_vision_model,
            max_tokens=settings.vision_max_tokens,
            temperature=settings.vision_temperature,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {"type": "base64", "media_type": mime_type, "data": image},
                        },
                        {"type": "text", "text": EXTRACTION_PROMPT},
                    ],
                }
            ],
        )
    except anthropic.APIStatusError as exc:
        logger.error("Anthropic vision request failed (%s): %s", exc.status_code, exc.message)
        raise UpstreamError(f"Vision API request failed: {exc.message}") from exc
    except anthropic.APIError as exc:
        logger.error("Anthropic vision request failed: %s", exc)
        raise UpstreamError(f"Vision API request failed: {exc}") from exc

    text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
    if not text:
        raise UpstreamError("No response from vision model")
    return text


_CALLERS = {
    VisionProvider.OPENAI: _call_openai,
    VisionProvider.ANTHROPIC: _call_anthropic,
}


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```` ```json ... ``` ````) around a reply."""
    return _CODE_FENCE.sub("", text).strip()


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE
    return min(max(float(value), 0.0), 1.0)


def _invalid_payload_keys(exc: ValidationError) -> set[str] | None:
    """Payload keys named by ``exc``, or None if any error lies outside ``data``."""
    keys: set[str] = set()
    for error in exc.errors():
        loc = error["loc"]
        if "data" not in loc:
            return None
        index = loc.index("data")
        if index + 1 >= len(loc):
            return None
        keys.add(str(loc[index + 1]))
    return keys


def item_from_reply(raw: dict[str, Any]) -> ExtractedItem:
    """Map one object from the model reply onto an ExtractedItem.

    A fresh ``id`` is always generated and any destination or icon the model
    supplied is ignored; both are derived from ``type``. Payload fields that
    fail validation are dropped and logged; the item itself is kept.

    Raises:
        pydantic.ValidationError: the item is malformed outside its payload.
    """
    data = raw.get("data")
    data = data if isinstance(data, dict) else {}
    description = raw.get("description")
    title = raw.get("title")
    fields: dict[str, Any] = {
        "type": str(raw.get("type") or ItemKind.TODO.value),
        "confidence": _coerce_confidence(raw.get("confidence")),
        "title": str(title) if title else "Untitled",
        "description": str(description) if description else None,
        "data": data,
    }
    try:
        return build_item(fields)
    except ValidationError as exc:
        invalid = _invalid_payload_keys(exc)
        if not invalid:
            raise
        logger.warning("Dropping invalid %s fields %s: %s", fields["type"], sorted(invalid), exc)
        fields["data"] = {
            key: value
            for key, value in data.items()
            if key not in invalid and to_camel(key) not in invalid
        }
        return build_item(fields)


def parse_reply(reply: str) -> list[ExtractedItem]:
    """Parse the model's textual reply into ExtractedItems.

    Raises:
        ParseError: the fence-stripped reply is not JSON, or not an array/object.
    """
    cleaned = strip_code_fences(reply)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse vision reply: %r", reply)
        raise ParseError("Failed to parse AI response") from exc

    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        logger.error("Vision reply is not a JSON array: %r", reply)
        raise ParseError("Failed to parse AI response")

    items: list[ExtractedItem] = []
    for raw in parsed:
        if not isinstance(raw, dict):
            logger.warning("Dropping non-object entry from vision reply: %r", raw)
            continue
        try:
            items.append(item_from_reply(raw))
        except ValidationError as exc:
            logger.warning("Dropping malformed item %r: %s", raw, exc)
    return items


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def extract_from_image(
    image: str | None,
    mime_type: str | None = None,
    provider: VisionProvider | str | None = None,
) -> VisionExtraction:
    """Extract items from an image with a hosted vision-language model.

    The provider request is awaited on the event loop, so cancelling the
    caller aborts it.

    Args:
        image: Base64 image data, optionally as a ``data:`` URL.
        mime_type: Image MIME type; defaults to ``image/jpeg``.
        provider: Vision provider; defaults to ``settings.vision_provider``.

    Returns:
        The parsed items (possibly empty) and the model's raw reply.

    Raises:
        ConfigurationError: the provider's API key is not configured.
        BadInputError: no image, or a malformed image payload.
        UpstreamError: the provider call failed or returned nothing.
        ParseError: the reply was not valid JSON.
    """
    resolved = _resolve_provider(provider)
    api_key = _require_api_key(resolved)
    data, mime = normalize_image(image, mime_type)

    reply = await _CALLERS[resolved](api_key, data, mime)
    items = parse_reply(reply)
    logger.info("Vision model (%s) returned %d items", resolved.value, len(items))
    return VisionExtraction(items=items, raw_text=reply)
