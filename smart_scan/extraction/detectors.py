"""Keyword/pattern heuristics that turn recognized text into extracted items.

Each detector handles one item kind and looks only at the text it is given.
Detectors are not mutually exclusive: :func:`detect_items` runs all of them
and concatenates whatever they find, so a birthday card that mentions a gift
card yields one item of each kind.

Meeting notes, workout plans and prescriptions have no detector here; only
the vision path produces them.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from typing import Protocol

from smart_scan.config import settings
from smart_scan.extraction import tokens
from smart_scan.extraction.kinds import ItemKind
from smart_scan.extraction.models import (
    BirthdayData,
    BirthdayItem,
    ExtractedItem,
    GiftCardData,
    GiftCardItem,
    InvitationData,
    InvitationItem,
    ReceiptData,
    ReceiptItem,
    ReceiptLineItem,
    TodoData,
    TodoItem,
)


class Detector(Protocol):
    """A stateless recognizer for one item kind."""

    kind: ItemKind

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        """Return the items of ``kind`` found in ``text`` (empty if none)."""
        ...


def split_lines(text: str) -> list[str]:
    """Trimmed, non-empty lines of ``text``."""
    return [line.strip() for line in text.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Birthday
# ---------------------------------------------------------------------------


class BirthdayDetector:
    kind = ItemKind.BIRTHDAY
    confidence = 0.7

    KEYWORDS = re.compile(r"\b(?:birthdays?|bdays?|b-days?|born|anniversary)\b", re.IGNORECASE)
    # Keyword is case-insensitive, the name itself must be capitalized.
    NAME = re.compile(
        r"(?i:happy\s+birthday|birthday|\bfor)\s+(?:(?i:to)\s+)?([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)"
    )

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        if not self.KEYWORDS.search(text):
            return []
        token = tokens.find_date(text)
        if token is None:
            return []

        name_match = self.NAME.search(text)
        person_name = name_match.group(1) if name_match else "Unknown"

        return [
            BirthdayItem(
                confidence=self.confidence,
                title=f"{person_name}'s Birthday",
                description=f"Birthday on {token.text}",
                data=BirthdayData(
                    person_name=person_name,
                    date=tokens.to_iso_date(token),
                    recurring=True,
                ),
            )
        ]


# ---------------------------------------------------------------------------
# Invitation
# ---------------------------------------------------------------------------


class InvitationDetector:
    kind = ItemKind.INVITATION
    confidence = 0.75

    KEYWORDS = re.compile(
        r"\b(?:invit(?:e|ed|es|ation)|please\s+join|you'?re\s+invited|rsvp|events?)\b",
        re.IGNORECASE,
    )
    EVENT_NAME = re.compile(r"\b(?i:to|for)\s+([A-Z][^.!?\n]{5,50})")
    LOCATION = re.compile(r"\b(?:at|location|venue|address)\b[\s:]+([^\n]{10,100})", re.IGNORECASE)

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        if not self.KEYWORDS.search(text):
            return []

        token = tokens.find_date(text)
        event_match = self.EVENT_NAME.search(text)
        if event_match:
            event_name = event_match.group(1).strip()
        else:
            event_name = lines[0] if lines else "Event"
        location_match = self.LOCATION.search(text)

        data = InvitationData(
            event_name=event_name,
            date=tokens.to_iso_date(token) if token else None,
            time=tokens.find_time(text),
            location=location_match.group(1).strip() if location_match else None,
        )
        return [
            InvitationItem(
                confidence=self.confidence,
                title=event_name,
                description=f"Event on {token.text if token else 'TBD'}",
                data=data,
            )
        ]


# ---------------------------------------------------------------------------
# To-do list
# ---------------------------------------------------------------------------


class TodoDetector:
    """One item per bulleted/numbered line, or one aggregate list on a keyword."""

    kind = ItemKind.TODO
    line_confidence = 0.8
    aggregate_confidence = 0.6
    max_aggregate_lines = 10

    KEYWORDS = re.compile(r"\b(?:to-?dos?|tasks?|checklists?|action\s+items?)\b", re.IGNORECASE)
    BULLET = re.compile(r"^[-*•◦▪□☐]\s+(.+)$")
    NUMBERED = re.compile(r"^\d+[.)]\s+(.+)$")

    def list_entries(self, lines: Sequence[str]) -> list[str]:
        entries: list[str] = []
        for line in lines:
            match = self.BULLET.match(line) or self.NUMBERED.match(line)
            if match:
                entries.append(match.group(1).strip())
        return entries

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        entries = self.list_entries(lines)
        if entries:
            return [
                TodoItem(
                    confidence=self.line_confidence,
                    title=entry,
                    data=TodoData(items=[entry], priority="medium"),
                )
                for entry in entries
            ]

        if not self.KEYWORDS.search(text):
            return []
        return [
            TodoItem(
                confidence=self.aggregate_confidence,
                title="Task List",
                description=f"{len(lines)} items found",
                data=TodoData(items=list(lines[: self.max_aggregate_lines]), priority="medium"),
            )
        ]


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------


class ReceiptDetector:
    kind = ItemKind.RECEIPT
    confidence = 0.7

    KEYWORDS = re.compile(r"\b(?:receipts?|invoices?|total|subtotal|tax|payment)\b", re.IGNORECASE)
    MERCHANT = re.compile(r"^([A-Z][^\n]{3,40})", re.MULTILINE)
    SKIP_LINE = re.compile(r"\b(?:amount|paid|change|cash|balance)\b", re.IGNORECASE)
    LINE_ITEM = re.compile(
        r"^(?P<name>[A-Za-z][^\d$€£₹\n]*?)\s+[$€£₹]?\s*(?P<price>\d+\.\d{2})$"
    )

    def line_items(self, lines: Sequence[str]) -> list[ReceiptLineItem]:
        items: list[ReceiptLineItem] = []
        for line in lines:
            if self.KEYWORDS.search(line) or self.SKIP_LINE.search(line):
                continue
            match = self.LINE_ITEM.match(line)
            if match:
                items.append(
                    ReceiptLineItem(name=match["name"].strip(), price=float(match["price"]))
                )
        return items

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        if not self.KEYWORDS.search(text):
            return []

        total = tokens.find_labeled_amount(text)
        amount = total.value if total else 0.0
        currency = (total.currency if total else None) or tokens.detect_currency(
            text, settings.default_currency
        )

        merchant_match = self.MERCHANT.search("\n".join(lines))
        merchant = merchant_match.group(1).strip() if merchant_match else "Unknown Merchant"

        token = tokens.find_numeric_date(text)
        receipt_date = tokens.to_iso_date(token) if token else date.today().isoformat()

        fields: dict[str, object] = {
            "merchant": merchant,
            "amount": amount,
            "currency": currency,
            "date": receipt_date,
        }
        line_items = self.line_items(lines)
        if line_items:
            fields["items"] = line_items

        return [
            ReceiptItem(
                confidence=self.confidence,
                title=f"Receipt from {merchant}",
                description=tokens.format_money(amount, currency),
                data=ReceiptData(**fields),
            )
        ]


# ---------------------------------------------------------------------------
# Gift card
# ---------------------------------------------------------------------------


class GiftCardDetector:
    kind = ItemKind.GIFT_CARD
    confidence = 0.75

    BRANDS: tuple[str, ...] = (
        "Amazon",
        "Starbucks",
        "Target",
        "Walmart",
        "iTunes",
        "Google Play",
        "Steam",
    )

    KEYWORDS = re.compile(r"gift\s?cards?|gift\s+certificates?|vouchers?", re.IGNORECASE)
    # Codes must contain a digit so words like "redeemable" are not picked up.
    CODE = re.compile(
        r"\b(code|pin|number)\b[\s:#]*(?=[A-Z-]*\d)([A-Z0-9-]{6,20})\b", re.IGNORECASE
    )
    EXPIRY_LABEL = re.compile(
        r"\b(?:exp(?:iry|ires|iration)?|valid\s+(?:until|thru|through))\b\.?[\s:]*", re.IGNORECASE
    )
    # Last resort for plain integers, only right next to the keyword ("gift card 50").
    BARE_AMOUNT = re.compile(
        r"(?:gift\s?cards?|gift\s+certificates?|vouchers?)\s*(?:of|for|worth)?[\s:]*"
        r"(\d{1,4})\b(?![/.:-]\d)"
        r"|\b(\d{1,4})\s+(?:gift\s?cards?|gift\s+certificates?|vouchers?)",
        re.IGNORECASE,
    )

    def brand(self, text: str) -> str:
        lowered = text.lower()
        for brand in self.BRANDS:
            if brand.lower() in lowered:
                return brand
        return "Unknown Brand"

    def bare_amount(self, text: str) -> tokens.Amount | None:
        match = self.BARE_AMOUNT.search(text)
        if match is None:
            return None
        return tokens.Amount(float(match.group(1) or match.group(2)), None)

    def expiry_date(self, text: str) -> str | None:
        label = self.EXPIRY_LABEL.search(text)
        if label is None:
            return None
        token = tokens.find_date(text[label.end() : label.end() + 40])
        if token is None or token.value is None:
            return None
        return token.value.isoformat()

    def detect(self, text: str, lines: Sequence[str]) -> list[ExtractedItem]:
        if not self.KEYWORDS.search(text):
            return []

        found = tokens.find_currency_amount(text) or self.bare_amount(text)
        amount = found.value if found else 0.0
        currency = (found.currency if found else None) or settings.default_currency
        brand = self.brand(text)

        fields: dict[str, object] = {"brand": brand, "amount": amount, "currency": currency}
        code_match = self.CODE.search(text)
        if code_match:
            label, value = code_match.group(1).lower(), code_match.group(2)
            fields["pin" if label == "pin" else "code"] = value
        expiry = self.expiry_date(text)
        if expiry:
            fields["expiry_date"] = expiry

        description = tokens.format_money(amount, currency)
        if code_match:
            description += " • Code found"

        return [
            GiftCardItem(
                confidence=self.confidence,
                title=f"{brand} Gift Card",
                description=description,
                data=GiftCardData(**fields),
            )
        ]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

DETECTORS: tuple[Detector, ...] = (
    BirthdayDetector(),
    InvitationDetector(),
    TodoDetector(),
    ReceiptDetector(),
    GiftCardDetector(),
)


def detect_items(text: str, detectors: Sequence[Detector] = DETECTORS) -> list[ExtractedItem]:
    """Run every detector over ``text`` and concatenate their items.

    Args:
        text: Raw recognized text (e.g. OCR output).
        detectors: Detector registry; defaults to :data:`DETECTORS`.

    Returns:
        The items found, in detector order. Empty when nothing matched.
    """
    lines = split_lines(text)
    items: list[ExtractedItem] = []
    for detector in detectors:
        items.extend(detector.detect(text, lines))
    return items
