"""Buyer and seller identity section."""
import asyncio
from typing import Optional

from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import OrderSummary, UserPayload, id_str

BUYER_FIELDS = (
    "buyer_id",
    "buyer_nickname",
    "buyer_email",
    "buyer_first_name",
    "buyer_last_name",
    "buyer_phone",
    "buyer_alternative_phone",
    "buyer_identification",
    "buyer_address",
    "buyer_reputation",
    "buyer_tags",
    "buyer_billing_info",
)

SELLER_FIELDS = (
    "seller_id",
    "seller_nickname",
    "seller_email",
    "seller_first_name",
    "seller_last_name",
    "seller_phone",
    "seller_address",
    "seller_reputation",
    "seller_tags",
    "seller_eshop",
    "seller_status",
)

FIELDS = BUYER_FIELDS + SELLER_FIELDS + ("raw_user_data",)


def _buyer_fields(buyer: UserPayload) -> dict:
    return {
        "buyer_id": id_str(buyer.id),
        "buyer_nickname": buyer.nickname,
        "buyer_email": buyer.email,
        "buyer_first_name": buyer.first_name,
        "buyer_last_name": buyer.last_name,
        "buyer_phone": buyer.phone,
        "buyer_alternative_phone": buyer.alternative_phone,
        "buyer_identification": buyer.identification,
        "buyer_address": buyer.address,
        "buyer_reputation": buyer.seller_reputation or buyer.buyer_reputation,
        "buyer_tags": buyer.tags,
        "buyer_billing_info": buyer.billing_info,
    }


def _seller_fields(seller: UserPayload) -> dict:
    return {
        "seller_id": id_str(seller.id),
        "seller_nickname": seller.nickname,
        "seller_email": seller.email,
        "seller_first_name": seller.first_name,
        "seller_last_name": seller.last_name,
        "seller_phone": seller.phone,
        "seller_address": seller.address,
        "seller_reputation": seller.seller_reputation,
        "seller_tags": seller.tags,
        "seller_eshop": seller.eshop,
        "seller_status": seller.status,
    }


async def _fetch_user(client: MLClient, endpoint: str, user_id: Optional[str]):
    if not user_id:
        return None, None
    path_key = "seller_id" if endpoint == endpoints.SELLER_DETAIL else "id"
    return await fetch_payload(client, endpoint, UserPayload, path_params={path_key: user_id})


@section("user_data", FIELDS)
async def enrich_users(order: OrderSummary, client: MLClient) -> dict:
    if not order.buyer_id and not order.seller_id:
        return {}

    results = await asyncio.gather(
        _fetch_user(client, endpoints.BUYER_DETAIL, order.buyer_id),
        _fetch_user(client, endpoints.SELLER_DETAIL, order.seller_id),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    (buyer, buyer_raw), (seller, seller_raw) = results

    fields = {"raw_user_data": {"buyer": buyer_raw, "seller": seller_raw}}
    if buyer is not None:
        fields.update(_buyer_fields(buyer))
    if seller is not None:
        fields.update(_seller_fields(seller))
    return fields
