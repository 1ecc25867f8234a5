"""Payment identifiers generated by the checkout widget.

Format: ``payment-{itemId}-{userId}-{timestamp}`` where both ids are UUIDs,
so the string splits on ``-`` into 1 + 5 + 5 + 1 parts.
"""

from typing import NamedTuple
from uuid import UUID

from app.catalog.schemas import ItemKind

PAYMENT_PREFIX = "payment"
UUID_PARTS = 5
UUID_LENGTH = 36


class ParsedPaymentId(NamedTuple):
    item_id: UUID
    user_id: UUID
    timestamp: str | None


def build_payment_id(item_id: UUID, user_id: UUID, now_ms: int) -> str:
    return f"{PAYMENT_PREFIX}-{item_id}-{user_id}-{now_ms}"


def build_free_payment_id(kind: ItemKind, item_id: UUID, user_id: UUID, now_ms: int) -> str:
    prefix = "free-ebook" if kind == ItemKind.EBOOK else "free"
    return f"{prefix}-{item_id}-{user_id}-{now_ms}"


def _to_uuid(parts: list[str]) -> UUID | None:
    value = "-".join(parts)
    if len(value) != UUID_LENGTH:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def parse_payment_id(payment_id: str, strict: bool = False) -> ParsedPaymentId | None:
    """Extract item and user ids from a payment id.

    The lenient form only needs the 12 parts the widget produces. ``strict``
    additionally requires the ``payment`` prefix but tolerates a missing
    timestamp. Returns None when either id is not a UUID.
    """
    parts = payment_id.split("-")
    item_end = 1 + UUID_PARTS
    user_end = item_end + UUID_PARTS

    if strict:
        if parts[0] != PAYMENT_PREFIX or len(parts) < user_end:
            return None
    elif len(parts) < user_end + 1:
        return None

    item_id = _to_uuid(parts[1:item_end])
    user_id = _to_uuid(parts[item_end:user_end])
    if item_id is None or user_id is None:
        return None

    timestamp = "-".join(parts[user_end:]) or None
    return ParsedPaymentId(item_id=item_id, user_id=user_id, timestamp=timestamp)
