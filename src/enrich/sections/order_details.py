"""Order detail section: context, mediations and the first line item."""
from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import OrderDetailPayload, OrderSummary, id_str

FIELDS = (
    "order_context",
    "order_mediations",
    "item_id",
    "item_variation_id",
    "item_variation_attributes",
    "item_quantity",
    "item_unit_price",
    "item_full_unit_price",
    "item_sale_fee",
    "item_seller_sku",
    "item_differential_pricing",
    "item_bundle",
    "item_manufacturing_days",
    "raw_order_detail_data",
)

MANUFACTURING_ATTRIBUTE = "MANUFACTURING_TIME"


@section("order_details", FIELDS)
async def enrich_order_details(order: OrderSummary, client: MLClient) -> dict:
    detail, raw = await fetch_payload(
        client, endpoints.ORDER_DETAIL, OrderDetailPayload, path_params={"id": order.id}
    )

    fields = {
        "order_context": detail.context,
        "order_mediations": detail.mediations,
        "raw_order_detail_data": raw,
    }

    if detail.order_items:
        line = detail.order_items[0]
        item = line.item
        fields.update(
            item_quantity=line.quantity,
            item_unit_price=line.unit_price,
            item_full_unit_price=line.full_unit_price,
            item_sale_fee=line.sale_fee,
        )
        if item is not None:
            manufacturing = next(
                (a.value_name for a in item.attributes if a.id == MANUFACTURING_ATTRIBUTE), None
            )
            fields.update(
                item_id=id_str(item.id),
                item_variation_id=id_str(item.variation_id),
                item_variation_attributes=item.variation_attributes,
                item_seller_sku=item.seller_sku or item.seller_custom_field,
                item_differential_pricing=item.differential_pricing,
                item_bundle=item.bundle,
                item_manufacturing_days=manufacturing,
            )
    return fields
