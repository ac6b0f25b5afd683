"""Data models for extracted items and scan results.

``ExtractedItem`` is a discriminated union over the eight item kinds: the
``type`` tag selects the variant, and each variant pins ``data`` to its own
payload model. Any other tag lands in :class:`OtherItem`, which keeps the
payload as-is. ``suggestedDestination`` and ``icon`` are computed from the
tag through :mod:`smart_scan.extraction.destinations` and cannot be set.
"""

from __future__ import annotations

import re
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    computed_field,
    field_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

from smart_scan.extraction import tokens
from smart_scan.extraction.destinations import route_for
from smart_scan.extraction.kinds import Destination, ItemKind
from smart_scan.scan_config import ScanMode

_KNOWN_KINDS = frozenset(kind.value for kind in ItemKind)
_OTHER_TAG = "other"

_MONEY = re.compile(r"-?\d[\d,]*(?:\.\d+)?")
_LIST_SEPARATOR = re.compile(r"[,;\n]")


def _money(value: Any) -> Any:
    """Read money strings such as ``"$4.50"`` as numbers."""
    if isinstance(value, str):
        match = _MONEY.search(value)
        if match:
            return tokens.parse_number(match.group())
    return value


def _string_list(value: Any) -> Any:
    """Split ``"Alice, Bob"`` into ``["Alice", "Bob"]``."""
    if isinstance(value, str):
        return [part.strip() for part in _LIST_SEPARATOR.split(value) if part.strip()]
    return value


Money = Annotated[float, BeforeValidator(_money), Field(ge=0)]
StringList = Annotated[list[str], BeforeValidator(_string_list)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class _Payload(_CamelModel):
    # Model replies may carry fields beyond the documented set; keep them.
    model_config = ConfigDict(extra="allow")


class BirthdayData(_Payload):
    person_name: str = "Unknown"
    date: str | None = None  # YYYY-MM-DD
    age: int | None = None
    message: str | None = None
    recurring: bool = True


class InvitationData(_Payload):
    event_name: str = "Event"
    date: str | None = None
    time: str | None = None  # HH:MM
    location: str | None = None
    host: str | None = None
    rsvp_info: str | None = None


class TodoData(_Payload):
    items: StringList = Field(default_factory=list)
    priority: str | None = None  # low | medium | high
    due_date: str | None = None


class ReceiptLineItem(_CamelModel):
    name: str
    price: Annotated[float, BeforeValidator(_money)] | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, value: Any) -> Any:
        # A bare string is a line item without a price.
        if isinstance(value, str):
            return {"name": value}
        return value


class ReceiptData(_Payload):
    merchant: str = "Unknown Merchant"
    amount: Money = 0.0
    currency: str = "USD"
    date: str | None = None
    items: list[ReceiptLineItem] | None = None
    category: str | None = None


class GiftCardData(_Payload):
    brand: str = "Unknown Brand"
    amount: Money = 0.0
    currency: str = "USD"
    code: str | None = None
    pin: str | None = None
    expiry_date: str | None = None


class MeetingNotesData(_Payload):
    meeting_title: str | None = None
    date: str | None = None
    attendees: StringList | None = None
    action_items: StringList = Field(default_factory=list)
    notes: str | None = None


class WorkoutPlanData(_Payload):
    goal_name: str = ""
    target_value: float | None = None
    target_unit: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    exercises: StringList | None = None


class PrescriptionData(_Payload):
    medicine_name: str = ""
    dosage: str = ""
    frequency: str = ""
    prescribed_by: str | None = None
    date: str | None = None
    refills: int | None = None
    warnings: StringList | None = None


class OtherData(_Payload):
    """Payload of an item whose kind is not an :class:`ItemKind`."""


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class _ItemBase(_CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    confidence: float = Field(ge=0.0, le=1.0)
    title: str = Field(min_length=1)
    description: str | None = None

    @property
    def kind(self) -> ItemKind | None:
        """The item kind, or None for a tag outside :class:`ItemKind`."""
        tag = self.type  # type: ignore[attr-defined]
        return ItemKind(tag) if tag in _KNOWN_KINDS else None

    @computed_field(alias="suggestedDestination")  # type: ignore[prop-decorator]
    @property
    def suggested_destination(self) -> Destination:
        return route_for(self.type).destination  # type: ignore[attr-defined]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def icon(self) -> str:
        return route_for(self.type).icon  # type: ignore[attr-defined]

    @field_serializer("data", check_fields=False)
    def _serialize_data(self, data: _Payload) -> dict[str, Any]:
        # Only the fields that were actually supplied go on the wire.
        return data.model_dump(by_alias=True, exclude_unset=True)


class BirthdayItem(_ItemBase):
    type: Literal["birthday"] = "birthday"
    data: BirthdayData = Field(default_factory=BirthdayData)


class InvitationItem(_ItemBase):
    type: Literal["invitation"] = "invitation"
    data: InvitationData = Field(default_factory=InvitationData)


class TodoItem(_ItemBase):
    type: Literal["todo"] = "todo"
    data: TodoData = Field(default_factory=TodoData)


class ReceiptItem(_ItemBase):
    type: Literal["receipt"] = "receipt"
    data: ReceiptData = Field(default_factory=ReceiptData)


class GiftCardItem(_ItemBase):
    type: Literal["gift-card"] = "gift-card"
    data: GiftCardData = Field(default_factory=GiftCardData)


class MeetingNotesItem(_ItemBase):
    type: Literal["meeting-notes"] = "meeting-notes"
    data: MeetingNotesData = Field(default_factory=MeetingNotesData)


class WorkoutPlanItem(_ItemBase):
    type: Literal["workout-plan"] = "workout-plan"
    data: WorkoutPlanData = Field(default_factory=WorkoutPlanData)


class PrescriptionItem(_ItemBase):
    type: Literal["prescription"] = "prescription"
    data: PrescriptionData = Field(default_factory=PrescriptionData)


class OtherItem(_ItemBase):
    """An item tagged with a kind that has no model here; routed to the default."""

    type: str = Field(min_length=1)
    data: OtherData = Field(default_factory=OtherData)


def _item_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if isinstance(kind, str) and kind in _KNOWN_KINDS:
        return kind
    return _OTHER_TAG


ExtractedItem = Annotated[
    Union[
        Annotated[BirthdayItem, Tag(ItemKind.BIRTHDAY.value)],
        Annotated[InvitationItem, Tag(ItemKind.INVITATION.value)],
        Annotated[TodoItem, Tag(ItemKind.TODO.value)],
        Annotated[ReceiptItem, Tag(ItemKind.RECEIPT.value)],
        Annotated[GiftCardItem, Tag(ItemKind.GIFT_CARD.value)],
        Annotated[MeetingNotesItem, Tag(ItemKind.MEETING_NOTES.value)],
        Annotated[WorkoutPlanItem, Tag(ItemKind.WORKOUT_PLAN.value)],
        Annotated[PrescriptionItem, Tag(ItemKind.PRESCRIPTION.value)],
        Annotated[OtherItem, Tag(_OTHER_TAG)],
    ],
    Discriminator(_item_tag),
]

extracted_item_adapter: TypeAdapter[ExtractedItem] = TypeAdapter(ExtractedItem)


def build_item(raw: dict[str, Any]) -> ExtractedItem:
    """Validate a camelCase item dict into the matching variant.

    A ``type`` outside :class:`ItemKind` yields an :class:`OtherItem`.

    Raises:
        pydantic.ValidationError: a missing ``type`` or a malformed payload.
    """
    return extracted_item_adapter.validate_python(raw)


# ---------------------------------------------------------------------------
# Scan envelope
# ---------------------------------------------------------------------------


class ScanResult(_CamelModel):
    """Uniform envelope returned by the scan orchestrator.

    ``mode`` is None only when the requested mode was not recognized, so no
    strategy ran.
    """

    success: bool
    mode: ScanMode | None
    items: list[ExtractedItem] = Field(default_factory=list)
    raw_text: str | None = None
    error: str | None = None
    processing_time: int = 0  # milliseconds
