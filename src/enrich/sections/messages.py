"""Messages section: counters over the order's post-sale conversation."""
from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import MessagesPayload, OrderSummary

FIELDS = (
    "messages_count",
    "last_message_date",
    "last_message_from",
    "unread_messages_count",
    "messages_from_buyer",
    "messages_from_seller",
    "raw_messages_data",
)


@section("messages_data", FIELDS)
async def enrich_messages(order: OrderSummary, client: MLClient) -> dict:
    messages, raw = await fetch_payload(
        client, endpoints.ORDER_MESSAGES, MessagesPayload, path_params={"id": order.id}
    )
    fields = {"raw_messages_data": raw}
    results = messages.results
    if not results:
        return fields

    # Results come newest first
    last = results[0]
    fields.update(
        messages_count=len(results),
        last_message_date=last.date_created,
        last_message_from=last.sender_id,
        unread_messages_count=sum(1 for m in results if not m.read),
        messages_from_buyer=sum(1 for m in results if order.buyer_id and m.sender_id == order.buyer_id),
        messages_from_seller=sum(1 for m in results if order.seller_id and m.sender_id == order.seller_id),
    )
    return fields
