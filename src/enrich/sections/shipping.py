"""Shipping section."""
from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import OrderSummary, ShipmentPayload, id_str

FIELDS = (
    "shipping_id",
    "shipping_status",
    "shipping_substatus",
    "shipping_mode",
    "shipping_method",
    "shipping_cost",
    "shipping_date_created",
    "shipping_date_shipped",
    "shipping_date_delivered",
    "shipping_date_first_printed",
    "shipping_tracking_number",
    "shipping_tracking_method",
    "shipping_receiver_address",
    "shipping_sender_address",
    "shipping_dimensions",
    "shipping_logistic_type",
    "shipping_estimated_delivery_date",
    "shipping_estimated_delivery_time",
    "shipping_estimated_handling_limit",
    "shipping_gross_amount",
    "shipping_service_id",
    "shipping_priority",
    "shipping_comments",
    "shipping_preferences",
    "shipping_market_place",
    "shipping_type",
    "shipping_application_id",
    "shipping_option",
    "shipping_tags",
    "shipping_delay",
    "shipping_handling_time",
    "shipping_local_pick_up",
    "shipping_store_pick_up",
    "raw_shipping_data",
)


@section("shipping_data", FIELDS)
async def enrich_shipping(order: OrderSummary, client: MLClient) -> dict:
    if not order.shipping_id:
        return {}

    shipment, raw = await fetch_payload(
        client, endpoints.SHIPMENT_DETAIL, ShipmentPayload, path_params={"id": order.shipping_id}
    )
    option = shipment.shipping_option or {}
    logistic = shipment.logistic or {}
    return {
        "shipping_id": id_str(shipment.id),
        "shipping_status": shipment.status,
        "shipping_substatus": shipment.substatus,
        "shipping_mode": shipment.mode,
        "shipping_method": id_str(shipment.shipping_method_id),
        "shipping_cost": shipment.cost,
        "shipping_date_created": shipment.date_created,
        "shipping_date_shipped": shipment.date_shipped,
        "shipping_date_delivered": shipment.date_delivered,
        "shipping_date_first_printed": shipment.date_first_printed,
        "shipping_tracking_number": shipment.tracking_number,
        "shipping_tracking_method": shipment.tracking_method,
        "shipping_receiver_address": shipment.receiver_address,
        "shipping_sender_address": shipment.sender_address,
        "shipping_dimensions": shipment.dimensions,
        "shipping_logistic_type": logistic.get("type"),
        "shipping_estimated_delivery_date": option.get("estimated_delivery_date"),
        "shipping_estimated_delivery_time": option.get("estimated_delivery_time"),
        "shipping_estimated_handling_limit": option.get("estimated_handling_limit"),
        "shipping_gross_amount": option.get("cost"),
        "shipping_service_id": id_str(shipment.service_id),
        "shipping_priority": option.get("priority"),
        "shipping_comments": shipment.comments,
        "shipping_preferences": shipment.preferences,
        "shipping_market_place": shipment.market_place,
        "shipping_type": shipment.type,
        "shipping_application_id": id_str(shipment.application_id),
        "shipping_option": shipment.shipping_option,
        "shipping_tags": shipment.tags,
        "shipping_delay": shipment.delay,
        "shipping_handling_time": shipment.handling_time,
        "shipping_local_pick_up": shipment.local_pick_up,
        "shipping_store_pick_up": shipment.store_pick_up,
        "raw_shipping_data": raw,
    }
