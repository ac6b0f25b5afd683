"""Sample OCR text and response builders shared by the test modules."""

from __future__ import annotations

from unittest.mock import MagicMock

BIRTHDAY_GIFT_TEXT = (
    "Happy Birthday John! Born 05/12/1990. Also buy him a Starbucks gift card $25"
)

RECEIPT_TEXT = """\
Corner Market
123 Main St
Milk 3.49
Bread 2.50
Subtotal: 5.99
Tax: 0.48
Total: $6.47
03/15/2024
Thank you for your payment
"""

INVITATION_TEXT = """\
You're invited to Sarah's Graduation Party
Saturday, June 14, 2025 at 7:30 pm
Location: 123 Maple Street, Springfield
RSVP by June 1
"""

GIFT_CARD_TEXT = """\
Amazon Gift Card
Value: $50.00
Claim Code: AB12-CD34-EF56
Expires 12/31/2026
"""


def openai_reply(content: str | None) -> MagicMock:
    """Build a chat.completions response whose first choice carries ``content``."""
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response
