"""Listing section: item details and, when linked, the catalog product."""
from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import CatalogProductPayload, ItemPayload, OrderSummary

FIELDS = (
    "item_title",
    "item_category_id",
    "item_condition",
    "item_warranty",
    "item_listing_type_id",
    "item_seller_custom_field",
    "item_picture_urls",
    "item_catalog_product_id",
    "item_global_price",
    "raw_item_data",
)


@section("item_data", FIELDS)
async def enrich_item(order: OrderSummary, client: MLClient) -> dict:
    line_item = order.first_item
    if line_item is None or line_item.id is None:
        return {}

    item, item_raw = await fetch_payload(
        client, endpoints.ITEM_DETAIL, ItemPayload, path_params={"id": line_item.id}
    )
    fields = {
        "item_title": item.title,
        "item_category_id": item.category_id,
        "item_condition": item.condition,
        "item_warranty": item.warranty,
        "item_listing_type_id": item.listing_type_id,
        "item_seller_custom_field": item.seller_custom_field,
        "item_picture_urls": [p.url for p in item.pictures],
        "item_catalog_product_id": item.catalog_product_id,
        "item_global_price": None,
    }

    catalog_raw = None
    if item.catalog_product_id:
        catalog, catalog_raw = await fetch_payload(
            client,
            endpoints.CATALOG_PRODUCT_DETAIL,
            CatalogProductPayload,
            path_params={"id": item.catalog_product_id},
        )
        if catalog.buy_box_winner is not None:
            fields["item_global_price"] = catalog.buy_box_winner.price

    fields["raw_item_data"] = {"item": item_raw, "catalog_product": catalog_raw}
    return fields
