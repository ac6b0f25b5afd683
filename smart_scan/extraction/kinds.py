"""Item kinds and suggested destinations."""

from __future__ import annotations

from enum import StrEnum


class ItemKind(StrEnum):
    """Classification categories an extracted item can belong to."""

    BIRTHDAY = "birthday"
    INVITATION = "invitation"
    TODO = "todo"
    RECEIPT = "receipt"
    GIFT_CARD = "gift-card"
    MEETING_NOTES = "meeting-notes"
    WORKOUT_PLAN = "workout-plan"
    PRESCRIPTION = "prescription"


class Destination(StrEnum):
    """Domain area an accepted item is filed into."""

    EVENT = "event"
    TASK = "task"
    TODO = "todo"
    JOURNAL = "journal"
    SAFE = "safe"  # credential/document vault
    GIFT_CARD = "gift-card"
    RESOLUTION = "resolution"
