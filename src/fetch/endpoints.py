"""Mercado Livre endpoint templates.

Each template doubles as the endpoint identifier recorded in
``endpoints_accessed``.
"""
from src.config import config

ORDER_SEARCH = "/orders/search"
ORDER_DETAIL = "/orders/{id}"
ORDER_FEEDBACK = "/orders/{id}/feedback"
PAYMENT_DETAIL = "/payments/{id}"
SHIPMENT_DETAIL = "/shipments/{id}"
CLAIM_SEARCH = "/post-purchase/v1/claims/search"
RETURN_DETAIL = "/post-purchase/v1/returns/{id}"
CHANGE_DETAIL = "/post-purchase/v1/changes/{id}"
BUYER_DETAIL = "/users/{id}"
SELLER_DETAIL = "/users/{seller_id}"
ITEM_DETAIL = "/items/{id}"
CATALOG_PRODUCT_DETAIL = "/catalog_products/{id}"
ORDER_MESSAGES = "/messages/orders/{id}"

ALL_ENDPOINTS = (
    ORDER_SEARCH,
    ORDER_DETAIL,
    ORDER_FEEDBACK,
    PAYMENT_DETAIL,
    SHIPMENT_DETAIL,
    CLAIM_SEARCH,
    RETURN_DETAIL,
    CHANGE_DETAIL,
    BUYER_DETAIL,
    SELLER_DETAIL,
    ITEM_DETAIL,
    CATALOG_PRODUCT_DETAIL,
    ORDER_MESSAGES,
)


def build_url(endpoint: str, path_params: dict | None = None, base: str | None = None) -> str:
    """Fill an endpoint template and prefix the API base URL."""
    path = endpoint.format(**{k: str(v) for k, v in (path_params or {}).items()})
    return f"{(base or config.ML_API_BASE).rstrip('/')}{path}"
