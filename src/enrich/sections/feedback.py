"""Feedback section: ratings left by the buyer and by the seller."""
from typing import Optional

from src.enrich.base import SectionFailed, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import FeedbackEntry, OrderSummary, feedback_entries, id_str

ROLES = ("buyer", "seller")
FIELDS = tuple(
    f"feedback_{role}_{name}"
    for role in ROLES
    for name in ("id", "rating", "message", "date_created", "fulfilled", "reply")
) + ("raw_feedback_data",)


def _role_fields(role: str, entry: Optional[FeedbackEntry]) -> dict:
    if entry is None:
        return {}
    return {
        f"feedback_{role}_id": id_str(entry.id),
        f"feedback_{role}_rating": entry.rating,
        f"feedback_{role}_message": entry.message,
        f"feedback_{role}_date_created": entry.date_created,
        f"feedback_{role}_fulfilled": entry.fulfilled,
        f"feedback_{role}_reply": entry.reply,
    }


@section("feedback_data", FIELDS)
async def enrich_feedback(order: OrderSummary, client: MLClient) -> dict:
    raw, error = await client.get(endpoints.ORDER_FEEDBACK, path_params={"id": order.id})
    if error is not None:
        raise SectionFailed(str(error))
    try:
        entries = feedback_entries(raw)
    except ValueError as e:
        raise SectionFailed(f"{endpoints.ORDER_FEEDBACK}: {e}") from e

    fields = {"raw_feedback_data": raw}
    for role in ROLES:
        entry = next((e for e in entries if e.role == role), None)
        fields.update(_role_fields(role, entry))
    return fields
