"""Claims section: first claim on the order plus its return or change."""
import asyncio

from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import (
    ChangePayload,
    ClaimSearchPayload,
    OrderSummary,
    ReturnPayload,
    id_str,
)

CLAIM_FIELDS = (
    "claim_id",
    "claim_status",
    "claim_stage",
    "claim_type",
    "claim_reason_id",
    "claim_date_created",
    "claim_last_updated",
    "claim_related_entities",
    "claim_resolution",
    "claim_participants",
    "raw_claims_data",
)

RETURN_FIELDS = (
    "return_id",
    "return_status",
    "return_status_money",
    "return_subtype",
    "return_date_created",
    "return_refund_at",
    "return_shipment_status",
    "return_intermediate_check",
    "return_tracking_number",
    "return_cause",
    "return_resolution",
    "raw_return_data",
)

CHANGE_FIELDS = (
    "change_id",
    "change_status",
    "change_type",
    "change_estimated_exchange_date",
    "change_new_orders_ids",
    "change_date_created",
    "change_reason",
    "change_tracking_info",
    "raw_change_data",
)

FIELDS = CLAIM_FIELDS + RETURN_FIELDS + CHANGE_FIELDS


async def _return_fields(client: MLClient, return_id: str) -> dict:
    ret, raw = await fetch_payload(
        client, endpoints.RETURN_DETAIL, ReturnPayload, path_params={"id": return_id}
    )
    return {
        "return_id": id_str(ret.id),
        "return_status": ret.status,
        "return_status_money": ret.status_money,
        "return_subtype": ret.subtype,
        "return_date_created": ret.date_created,
        "return_refund_at": ret.refund_at,
        "return_shipment_status": ret.shipment_status,
        "return_intermediate_check": ret.intermediate_check,
        "return_tracking_number": ret.tracking_number,
        "return_cause": ret.cause,
        "return_resolution": ret.resolution,
        "raw_return_data": raw,
    }


async def _change_fields(client: MLClient, change_id: str) -> dict:
    change, raw = await fetch_payload(
        client, endpoints.CHANGE_DETAIL, ChangePayload, path_params={"id": change_id}
    )
    return {
        "change_id": id_str(change.id),
        "change_status": change.status,
        "change_type": change.type,
        "change_estimated_exchange_date": change.estimated_exchange_date,
        "change_new_orders_ids": change.new_orders_ids,
        "change_date_created": change.date_created,
        "change_reason": change.reason,
        "change_tracking_info": change.tracking_info,
        "raw_change_data": raw,
    }


@section("claims_data", FIELDS)
async def enrich_claims(order: OrderSummary, client: MLClient) -> dict:
    search, raw = await fetch_payload(
        client,
        endpoints.CLAIM_SEARCH,
        ClaimSearchPayload,
        params={"resource_id": order.order_id, "resource": "order"},
    )
    fields = {"raw_claims_data": raw}
    if not search.data:
        return fields

    claim = search.data[0]
    fields.update(
        claim_id=id_str(claim.id),
        claim_status=claim.status,
        claim_stage=claim.stage,
        claim_type=claim.type,
        claim_reason_id=claim.reason_id,
        claim_date_created=claim.date_created,
        claim_last_updated=claim.last_updated,
        claim_related_entities=[e.model_dump() for e in claim.related_entities],
        claim_resolution=claim.resolution,
        claim_participants=claim.participants,
    )

    # Dependent lookups need the ids from the claim
    lookups = []
    return_id = claim.related_id("return")
    if return_id:
        lookups.append(_return_fields(client, return_id))
    change_id = claim.related_id("change")
    if change_id:
        lookups.append(_change_fields(client, change_id))

    results = await asyncio.gather(*lookups, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
        fields.update(result)
    return fields
