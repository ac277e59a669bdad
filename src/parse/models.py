"""Data models for enriched sales."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.parse.redact import redact_json


class SyncErrorEntry(BaseModel):
    """One failed section of an enrichment pass."""

    model_config = ConfigDict(frozen=True)

    step: str
    error: str


class EnrichedSale(BaseModel):
    """
    Complete sale record (one row of ``vendas_completas``).

    Flat, column-style fields grouped by prefix. A section left at None
    either does not exist for the order or has a matching entry in
    ``sync_errors``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Order (from the search result, refined by the order-detail section)
    order_id: str = Field(..., description="Marketplace order id (primary key)")
    order_date_created: Optional[str] = None
    order_date_closed: Optional[str] = None
    order_last_updated: Optional[str] = None
    order_status: Optional[str] = None
    order_status_detail: Any = None
    order_total_amount: Any = None
    order_paid_amount: Any = None
    order_currency_id: Optional[str] = None
    order_pack_id: Optional[str] = None
    order_tags: list[Any] = Field(default_factory=list)
    order_manufacturing_ending_date: Optional[str] = None
    order_manufacturing_start_date: Optional[str] = None
    order_expiration_date: Optional[str] = None
    order_fulfilled: Optional[bool] = None
    order_mediations: Any = None
    order_context: Any = None

    # Line item (order detail)
    item_id: Optional[str] = None
    item_variation_id: Optional[str] = None
    item_variation_attributes: Any = None
    item_quantity: Any = None
    item_unit_price: Any = None
    item_full_unit_price: Any = None
    item_sale_fee: Any = None
    item_seller_sku: Optional[str] = None
    item_differential_pricing: Any = None
    item_bundle: Any = None
    item_manufacturing_days: Optional[str] = None

    # Listing and catalog (item section)
    item_title: Optional[str] = None
    item_category_id: Optional[str] = None
    item_condition: Optional[str] = None
    item_warranty: Optional[str] = None
    item_listing_type_id: Optional[str] = None
    item_seller_custom_field: Optional[str] = None
    item_picture_urls: Optional[list[Any]] = None
    item_catalog_product_id: Optional[str] = None
    item_global_price: Any = None

    # Payment
    payment_id: Optional[str] = None
    payment_status: Optional[str] = None
    payment_status_detail: Optional[str] = None
    payment_method_id: Optional[str] = None
    payment_payment_type_id: Optional[str] = None
    payment_installments: Any = None
    payment_transaction_amount: Any = None
    payment_transaction_amount_refunded: Any = None
    payment_taxes_amount: Any = None
    payment_shipping_cost: Any = None
    payment_date_approved: Optional[str] = None
    payment_date_created: Optional[str] = None
    payment_date_last_modified: Optional[str] = None
    payment_available_actions: Any = None
    payment_card_id: Optional[str] = None
    payment_card_first_six_digits: Optional[str] = None
    payment_card_last_four_digits: Optional[str] = None
    payment_issuer_id: Optional[str] = None
    payment_issuer_name: Optional[str] = None
    payment_atm_transfer_reference: Any = None
    payment_coupon_amount: Any = None
    payment_installment_amount: Any = None
    payment_deferred_period: Any = None
    payment_authorization_code: Optional[str] = None
    payment_operation_type: Optional[str] = None
    payment_total_paid_amount: Any = None
    payment_overpaid_amount: Any = None

    # Shipping
    shipping_id: Optional[str] = None
    shipping_status: Optional[str] = None
    shipping_substatus: Optional[str] = None
    shipping_mode: Optional[str] = None
    shipping_method: Optional[str] = None
    shipping_cost: Any = None
    shipping_date_created: Optional[str] = None
    shipping_date_shipped: Optional[str] = None
    shipping_date_delivered: Optional[str] = None
    shipping_date_first_printed: Optional[str] = None
    shipping_tracking_number: Optional[str] = None
    shipping_tracking_method: Optional[str] = None
    shipping_receiver_address: Any = None
    shipping_sender_address: Any = None
    shipping_dimensions: Any = None
    shipping_logistic_type: Optional[str] = None
    shipping_estimated_delivery_date: Any = None
    shipping_estimated_delivery_time: Any = None
    shipping_estimated_handling_limit: Any = None
    shipping_gross_amount: Any = None
    shipping_service_id: Optional[str] = None
    shipping_priority: Any = None
    shipping_comments: Any = None
    shipping_preferences: Any = None
    shipping_market_place: Optional[str] = None
    shipping_type: Optional[str] = None
    shipping_application_id: Optional[str] = None
    shipping_option: Any = None
    shipping_tags: Any = None
    shipping_delay: Any = None
    shipping_handling_time: Any = None
    shipping_local_pick_up: Any = None
    shipping_store_pick_up: Any = None

    # Claim / return / change
    claim_id: Optional[str] = None
    claim_status: Optional[str] = None
    claim_stage: Optional[str] = None
    claim_type: Optional[str] = None
    claim_reason_id: Optional[str] = None
    claim_date_created: Optional[str] = None
    claim_last_updated: Optional[str] = None
    claim_related_entities: Any = None
    claim_resolution: Any = None
    claim_participants: Any = None
    return_id: Optional[str] = None
    return_status: Optional[str] = None
    return_status_money: Optional[str] = None
    return_subtype: Optional[str] = None
    return_date_created: Optional[str] = None
    return_refund_at: Optional[str] = None
    return_shipment_status: Optional[str] = None
    return_intermediate_check: Any = None
    return_tracking_number: Optional[str] = None
    return_cause: Any = None
    return_resolution: Any = None
    change_id: Optional[str] = None
    change_status: Optional[str] = None
    change_type: Optional[str] = None
    change_estimated_exchange_date: Any = None
    change_new_orders_ids: Any = None
    change_date_created: Optional[str] = None
    change_reason: Any = None
    change_tracking_info: Any = None

    # Buyer
    buyer_id: Optional[str] = None
    buyer_nickname: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_first_name: Optional[str] = None
    buyer_last_name: Optional[str] = None
    buyer_phone: Any = None
    buyer_alternative_phone: Any = None
    buyer_identification: Any = None
    buyer_address: Any = None
    buyer_reputation: Any = None
    buyer_tags: Any = None
    buyer_billing_info: Any = None

    # Seller
    seller_id: Optional[str] = None
    seller_nickname: Optional[str] = None
    seller_email: Optional[str] = None
    seller_first_name: Optional[str] = None
    seller_last_name: Optional[str] = None
    seller_phone: Any = None
    seller_address: Any = None
    seller_reputation: Any = None
    seller_tags: Any = None
    seller_eshop: Any = None
    seller_status: Any = None

    # Feedback
    feedback_buyer_id: Optional[str] = None
    feedback_buyer_rating: Optional[str] = None
    feedback_buyer_message: Optional[str] = None
    feedback_buyer_date_created: Optional[str] = None
    feedback_buyer_fulfilled: Optional[bool] = None
    feedback_buyer_reply: Any = None
    feedback_seller_id: Optional[str] = None
    feedback_seller_rating: Optional[str] = None
    feedback_seller_message: Optional[str] = None
    feedback_seller_date_created: Optional[str] = None
    feedback_seller_fulfilled: Optional[bool] = None
    feedback_seller_reply: Any = None

    # Messages
    messages_count: Optional[int] = None
    last_message_date: Optional[str] = None
    last_message_from: Optional[str] = None
    unread_messages_count: Optional[int] = None
    messages_from_buyer: Optional[int] = None
    messages_from_seller: Optional[int] = None

    # Raw snapshots
    raw_order_data: Optional[dict] = None
    raw_order_detail_data: Any = None
    raw_payment_data: Any = None
    raw_shipping_data: Any = None
    raw_claims_data: Any = None
    raw_return_data: Any = None
    raw_change_data: Any = None
    raw_user_data: Any = None
    raw_item_data: Any = None
    raw_feedback_data: Any = None
    raw_messages_data: Any = None

    # Sync metadata
    data_completeness_score: int = Field(0, ge=0, le=100)
    sync_errors: list[SyncErrorEntry] = Field(default_factory=list)
    endpoints_accessed: list[str] = Field(default_factory=list)
    sync_duration_ms: int = 0
    last_sync: Optional[str] = None

    @property
    def completeness_score(self) -> int:
        return self.data_completeness_score

    @property
    def failed_steps(self) -> list[str]:
        return [entry.step for entry in self.sync_errors]

    def to_row(self) -> dict[str, Any]:
        """JSON-safe dict matching the table columns, raw snapshots redacted."""
        row = self.model_dump(mode="json")
        for key in RAW_FIELDS:
            row[key] = redact_json(row[key])
        return row


SALE_FIELDS = frozenset(EnrichedSale.model_fields)
RAW_FIELDS = tuple(name for name in EnrichedSale.model_fields if name.startswith("raw_"))


class BatchResult(BaseModel):
    """Outcome of one batch; ``error`` is set only when ``success`` is False."""

    success: bool
    count: int = 0
    duration_ms: int = 0
    endpoints_accessed: list[str] = Field(default_factory=list)
    records: list[EnrichedSale] = Field(default_factory=list)
    failed_orders: list[str] = Field(default_factory=list)
    section_errors: dict[str, int] = Field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, duration_ms: int = 0) -> "BatchResult":
        return cls(success=False, error=error, duration_ms=duration_ms)

    def to_response(self) -> dict[str, Any]:
        """Response body in the shape callers of the sync endpoint expect."""
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "count": self.count,
            "duration_ms": self.duration_ms,
            "endpoints_accessed": self.endpoints_accessed,
            "failed_orders": self.failed_orders,
            "section_errors": self.section_errors,
            "records": [record.to_row() for record in self.records],
        }
