"""Enrich one order: run every section concurrently, merge, score."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence, Union

from pydantic import ValidationError

from src.enrich.base import SectionResult
from src.enrich.scoring import completeness_score
from src.enrich.sections.claims import enrich_claims
from src.enrich.sections.feedback import enrich_feedback
from src.enrich.sections.item import enrich_item
from src.enrich.sections.messages import enrich_messages
from src.enrich.sections.order_details import enrich_order_details
from src.enrich.sections.payment import enrich_payment
from src.enrich.sections.shipping import enrich_shipping
from src.enrich.sections.users import enrich_users
from src.errors import OrderEnrichmentError
from src.fetch.client import MLClient
from src.parse.models import EnrichedSale, SyncErrorEntry
from src.parse.payloads import OrderSummary, id_str

logger = logging.getLogger(__name__)

Section = Callable[[OrderSummary, MLClient], Awaitable[SectionResult]]

# Merge order, and the order of sync_errors entries
SECTIONS: tuple[Section, ...] = (
    enrich_order_details,
    enrich_payment,
    enrich_shipping,
    enrich_claims,
    enrich_users,
    enrich_item,
    enrich_feedback,
    enrich_messages,
)


def base_fields(order: OrderSummary) -> dict[str, Any]:
    """Fields available straight from the search result."""
    return {
        "order_id": order.order_id,
        "order_date_created": order.date_created,
        "order_date_closed": order.date_closed,
        "order_last_updated": order.last_updated,
        "order_status": order.status,
        "order_status_detail": order.status_detail,
        "order_total_amount": order.total_amount,
        "order_paid_amount": order.paid_amount,
        "order_currency_id": order.currency_id,
        "order_pack_id": id_str(order.pack_id),
        "order_tags": list(order.tags),
        "order_manufacturing_ending_date": order.manufacturing_ending_date,
        "order_manufacturing_start_date": order.manufacturing_start_date,
        "order_expiration_date": order.expiration_date,
        "order_fulfilled": order.fulfilled,
        "order_mediations": order.mediations,
        "order_context": order.context,
        "raw_order_data": order.raw or order.model_dump(mode="json", by_alias=True),
    }


async def enrich_order(
    order: Union[OrderSummary, dict],
    client: MLClient,
    sections: Sequence[Section] = SECTIONS,
) -> EnrichedSale:
    """Build the complete sale for one order.

    Section failures end up in ``sync_errors``; only an order that cannot be
    turned into a record at all raises :class:`OrderEnrichmentError`.
    """
    started = time.monotonic()
    if isinstance(order, dict):
        try:
            order = OrderSummary.from_api(order)
        except ValidationError as e:
            raise OrderEnrichmentError(f"invalid order summary: {e}", id_str(order.get("id"))) from e
    if not order.order_id:
        raise OrderEnrichmentError("order summary has no id")

    tracker = client.tracker.child()
    scoped_client = client.bind(tracker)

    results: list[SectionResult] = await asyncio.gather(
        *(enrich(order, scoped_client) for enrich in sections)
    )

    fields = base_fields(order)
    sync_errors = []
    for result in results:
        if result.ok:
            fields.update(result.fields)
        else:
            sync_errors.append(SyncErrorEntry(step=result.step, error=result.error))

    fields["data_completeness_score"] = completeness_score(fields)
    fields["sync_errors"] = sync_errors
    fields["endpoints_accessed"] = tracker.snapshot()
    fields["last_sync"] = datetime.now(timezone.utc).isoformat()
    fields["sync_duration_ms"] = int((time.monotonic() - started) * 1000)

    try:
        sale = EnrichedSale(**fields)
    except ValidationError as e:
        raise OrderEnrichmentError(f"could not build record: {e}", order.order_id) from e

    logger.debug(
        f"Order {sale.order_id}: score={sale.completeness_score} "
        f"errors={sale.failed_steps} in {sale.sync_duration_ms}ms"
    )
    return sale
