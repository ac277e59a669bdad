"""Completeness score of an enriched sale."""
from collections.abc import Mapping
from typing import Any, Optional, Sequence

IMPORTANT_FIELDS = (
    "order_id",
    "order_status",
    "order_total_amount",
    "item_id",
    "item_title",
    "item_quantity",
    "payment_id",
    "payment_status",
    "payment_method_id",
    "shipping_id",
    "shipping_status",
    "shipping_tracking_number",
    "buyer_id",
    "buyer_nickname",
    "seller_id",
    "seller_nickname",
)


def is_filled(value: Any) -> bool:
    return value is not None and value != ""


def completeness_score(record: Any, fields: Optional[Sequence[str]] = None) -> int:
    """Percentage (0-100) of ``fields`` that are neither None nor empty string.

    ``record`` may be a mapping or any object with the fields as attributes.
    Halves round up.
    """
    fields = IMPORTANT_FIELDS if fields is None else tuple(fields)
    if not fields:
        raise ValueError("completeness needs at least one field")

    if isinstance(record, Mapping):
        values = [record.get(name) for name in fields]
    else:
        values = [getattr(record, name, None) for name in fields]

    filled = sum(1 for value in values if is_filled(value))
    # half-up rounding in integer arithmetic
    return (200 * filled + len(fields)) // (2 * len(fields))
