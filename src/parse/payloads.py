"""Typed views over Mercado Livre API responses.

Every field is optional. Unknown keys are ignored here; the verbatim
response is kept separately as the raw snapshot of each section.
"""
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

Id = Optional[Union[int, str]]
Number = Optional[Union[int, float]]


def id_str(value: Any) -> Optional[str]:
    """Identifiers are persisted as strings."""
    if value is None or value == "":
        return None
    return str(value)


class Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # explicit nulls fall back to the field default ([] for lists)
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Ref(Payload):
    id: Id = None


class ItemAttribute(Payload):
    id: Optional[str] = None
    value_name: Optional[str] = None


class Picture(Payload):
    url: Optional[str] = None


class OrderLineItem(Payload):
    id: Id = None
    title: Optional[str] = None
    category_id: Optional[str] = None
    condition: Optional[str] = None
    warranty: Optional[str] = None
    variation_id: Id = None
    variation_attributes: Any = None
    seller_custom_field: Optional[str] = None
    seller_sku: Optional[str] = None
    listing_type_id: Optional[str] = None
    differential_pricing: Any = None
    bundle: Any = None
    pictures: list[Picture] = Field(default_factory=list)
    catalog_product_id: Optional[str] = None
    price: Number = None
    attributes: list[ItemAttribute] = Field(default_factory=list)


class OrderLine(Payload):
    item: Optional[OrderLineItem] = None
    quantity: Number = None
    unit_price: Number = None
    full_unit_price: Number = None
    sale_fee: Number = None


class OrderSummary(Payload):
    """One order as returned by /orders/search (and /orders/{id})."""

    id: Id = None
    status: Optional[str] = None
    status_detail: Any = None
    date_created: Optional[str] = None
    date_closed: Optional[str] = None
    last_updated: Optional[str] = None
    total_amount: Number = None
    paid_amount: Number = None
    currency_id: Optional[str] = None
    pack_id: Id = None
    tags: list[Any] = Field(default_factory=list)
    manufacturing_ending_date: Optional[str] = None
    manufacturing_start_date: Optional[str] = None
    expiration_date: Optional[str] = None
    fulfilled: Optional[bool] = None
    mediations: Any = None
    context: Any = None
    buyer: Optional[Ref] = None
    seller: Optional[Ref] = None
    payments: list[Ref] = Field(default_factory=list)
    shipping: Optional[Ref] = None
    order_items: list[OrderLine] = Field(default_factory=list)

    _raw: dict = PrivateAttr(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "OrderSummary":
        order = cls.model_validate(data)
        order._raw = data
        return order

    @property
    def raw(self) -> dict:
        return self._raw

    @property
    def order_id(self) -> Optional[str]:
        return id_str(self.id)

    @property
    def buyer_id(self) -> Optional[str]:
        return id_str(self.buyer.id) if self.buyer else None

    @property
    def seller_id(self) -> Optional[str]:
        return id_str(self.seller.id) if self.seller else None

    @property
    def shipping_id(self) -> Optional[str]:
        return id_str(self.shipping.id) if self.shipping else None

    @property
    def first_item(self) -> Optional[OrderLineItem]:
        if not self.order_items:
            return None
        return self.order_items[0].item


class OrderDetailPayload(OrderSummary):
    pass


class OrderSearchPayload(Payload):
    results: list[Any] = Field(default_factory=list)
    paging: Any = None


class CardInfo(Payload):
    id: Id = None
    first_six_digits: Optional[str] = None
    last_four_digits: Optional[str] = None


class Issuer(Payload):
    name: Optional[str] = None


class PaymentPayload(Payload):
    id: Id = None
    status: Optional[str] = None
    status_detail: Optional[str] = None
    payment_method_id: Optional[str] = None
    payment_type_id: Optional[str] = None
    installments: Number = None
    transaction_amount: Number = None
    transaction_amount_refunded: Number = None
    taxes_amount: Number = None
    shipping_cost: Number = None
    date_approved: Optional[str] = None
    date_created: Optional[str] = None
    date_last_modified: Optional[str] = None
    available_actions: Any = None
    card: Optional[CardInfo] = None
    issuer_id: Id = None
    issuer: Optional[Issuer] = None
    atm_transfer_reference: Any = None
    coupon_amount: Number = None
    installment_amount: Number = None
    deferred_period: Any = None
    authorization_code: Optional[str] = None
    operation_type: Optional[str] = None
    total_paid_amount: Number = None
    overpaid_amount: Number = None


class ShipmentPayload(Payload):
    id: Id = None
    status: Optional[str] = None
    substatus: Optional[str] = None
    mode: Optional[str] = None
    shipping_method_id: Id = None
    cost: Number = None
    date_created: Optional[str] = None
    date_shipped: Optional[str] = None
    date_delivered: Optional[str] = None
    date_first_printed: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_method: Optional[str] = None
    receiver_address: Any = None
    sender_address: Any = None
    dimensions: Any = None
    logistic: Optional[dict] = None
    shipping_option: Optional[dict] = None
    service_id: Id = None
    comments: Any = None
    preferences: Any = None
    market_place: Optional[str] = None
    type: Optional[str] = None
    application_id: Id = None
    tags: Any = None
    delay: Any = None
    handling_time: Any = None
    local_pick_up: Any = None
    store_pick_up: Any = None


class RelatedEntity(Payload):
    model_config = ConfigDict(extra="allow")

    id: Id = None
    type: Optional[str] = None


class ClaimPayload(Payload):
    id: Id = None
    status: Optional[str] = None
    stage: Optional[str] = None
    type: Optional[str] = None
    reason_id: Optional[str] = None
    date_created: Optional[str] = None
    last_updated: Optional[str] = None
    related_entities: list[RelatedEntity] = Field(default_factory=list)
    resolution: Any = None
    participants: Any = None

    def related_id(self, entity_type: str) -> Optional[str]:
        """First related entity id of the given type (``return``/``change``)."""
        for entity in self.related_entities:
            if entity.type == entity_type and entity.id is not None:
                return id_str(entity.id)
        return None


class ClaimSearchPayload(Payload):
    data: list[ClaimPayload] = Field(default_factory=list)


class ReturnPayload(Payload):
    id: Id = None
    status: Optional[str] = None
    status_money: Optional[str] = None
    subtype: Optional[str] = None
    date_created: Optional[str] = None
    refund_at: Optional[str] = None
    shipment_status: Optional[str] = None
    intermediate_check: Any = None
    tracking_number: Optional[str] = None
    cause: Any = None
    resolution: Any = None


class ChangePayload(Payload):
    id: Id = None
    status: Optional[str] = None
    type: Optional[str] = None
    estimated_exchange_date: Any = None
    new_orders_ids: Any = None
    date_created: Optional[str] = None
    reason: Any = None
    tracking_info: Any = None


class UserPayload(Payload):
    id: Id = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Any = None
    alternative_phone: Any = None
    identification: Any = None
    address: Any = None
    seller_reputation: Any = None
    buyer_reputation: Any = None
    tags: Any = None
    billing_info: Any = None
    eshop: Any = None
    status: Any = None


class ItemPayload(Payload):
    id: Id = None
    title: Optional[str] = None
    category_id: Optional[str] = None
    condition: Optional[str] = None
    warranty: Optional[str] = None
    listing_type_id: Optional[str] = None
    seller_custom_field: Optional[str] = None
    pictures: list[Picture] = Field(default_factory=list)
    catalog_product_id: Optional[str] = None
    price: Number = None


class BuyBoxWinner(Payload):
    price: Number = None


class CatalogProductPayload(Payload):
    id: Id = None
    buy_box_winner: Optional[BuyBoxWinner] = None


class FeedbackEntry(Payload):
    id: Id = None
    role: Optional[str] = None
    rating: Optional[str] = None
    message: Optional[str] = None
    date_created: Optional[str] = None
    fulfilled: Optional[bool] = None
    reply: Any = None


def feedback_entries(payload: Any) -> list[FeedbackEntry]:
    """Feedback comes as a list or as ``{"sale": {...}, "purchase": {...}}``."""
    if isinstance(payload, list):
        raw_entries = payload
    elif isinstance(payload, dict):
        raw_entries = [v for v in payload.values() if isinstance(v, dict)]
    else:
        raise ValueError(f"unexpected feedback payload type {type(payload).__name__}")
    return [FeedbackEntry.model_validate(entry) for entry in raw_entries if isinstance(entry, dict)]


class MessageParty(Payload):
    user_id: Id = None


class MessageEntry(Payload):
    id: Id = None
    date_created: Optional[str] = None
    read: Any = None
    from_: Optional[MessageParty] = Field(default=None, alias="from")

    @property
    def sender_id(self) -> Optional[str]:
        return id_str(self.from_.user_id) if self.from_ else None


class MessagesPayload(Payload):
    results: list[MessageEntry] = Field(default_factory=list)
