"""Destination router: the single kind -> (destination, icon) policy table.

Both extraction paths annotate items through :func:`route_for`; nothing else
decides where a suggestion goes.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from smart_scan.extraction.kinds import Destination, ItemKind


@dataclass(frozen=True)
class Route:
    """Where an accepted item goes, and the glyph shown next to it."""

    destination: Destination
    icon: str


ROUTES = MappingProxyType(
    {
        ItemKind.BIRTHDAY: Route(Destination.EVENT, "🎂"),
        ItemKind.INVITATION: Route(Destination.EVENT, "💌"),
        ItemKind.TODO: Route(Destination.TODO, "✅"),
        ItemKind.RECEIPT: Route(Destination.SAFE, "🧾"),
        ItemKind.GIFT_CARD: Route(Destination.GIFT_CARD, "🎁"),
        ItemKind.MEETING_NOTES: Route(Destination.TASK, "📋"),
        ItemKind.WORKOUT_PLAN: Route(Destination.RESOLUTION, "🏃"),
        ItemKind.PRESCRIPTION: Route(Destination.SAFE, "💊"),
    }
)

DEFAULT_ROUTE = Route(Destination.TASK, "📄")


def route_for(kind: str | None) -> Route:
    """Return the route for ``kind``; unrecognized kinds get :data:`DEFAULT_ROUTE`."""
    if not kind:
        return DEFAULT_ROUTE
    try:
        return ROUTES[ItemKind(kind)]
    except ValueError:
        return DEFAULT_ROUTE
