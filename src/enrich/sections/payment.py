"""Payment section: details of the order's first payment."""
from src.enrich.base import fetch_payload, section
from src.fetch import endpoints
from src.fetch.client import MLClient
from src.parse.payloads import OrderSummary, PaymentPayload, id_str

FIELDS = (
    "payment_id",
    "payment_status",
    "payment_status_detail",
    "payment_method_id",
    "payment_payment_type_id",
    "payment_installments",
    "payment_transaction_amount",
    "payment_transaction_amount_refunded",
    "payment_taxes_amount",
    "payment_shipping_cost",
    "payment_date_approved",
    "payment_date_created",
    "payment_date_last_modified",
    "payment_available_actions",
    "payment_card_id",
    "payment_card_first_six_digits",
    "payment_card_last_four_digits",
    "payment_issuer_id",
    "payment_issuer_name",
    "payment_atm_transfer_reference",
    "payment_coupon_amount",
    "payment_installment_amount",
    "payment_deferred_period",
    "payment_authorization_code",
    "payment_operation_type",
    "payment_total_paid_amount",
    "payment_overpaid_amount",
    "raw_payment_data",
)


@section("payment_data", FIELDS)
async def enrich_payment(order: OrderSummary, client: MLClient) -> dict:
    payment_ids = [p.id for p in order.payments if p.id is not None]
    if not payment_ids:
        return {}

    payment, raw = await fetch_payload(
        client, endpoints.PAYMENT_DETAIL, PaymentPayload, path_params={"id": payment_ids[0]}
    )
    card = payment.card
    return {
        "payment_id": id_str(payment.id),
        "payment_status": payment.status,
        "payment_status_detail": payment.status_detail,
        "payment_method_id": payment.payment_method_id,
        "payment_payment_type_id": payment.payment_type_id,
        "payment_installments": payment.installments,
        "payment_transaction_amount": payment.transaction_amount,
        "payment_transaction_amount_refunded": payment.transaction_amount_refunded,
        "payment_taxes_amount": payment.taxes_amount,
        "payment_shipping_cost": payment.shipping_cost,
        "payment_date_approved": payment.date_approved,
        "payment_date_created": payment.date_created,
        "payment_date_last_modified": payment.date_last_modified,
        "payment_available_actions": payment.available_actions,
        "payment_card_id": id_str(card.id) if card else None,
        "payment_card_first_six_digits": card.first_six_digits if card else None,
        "payment_card_last_four_digits": card.last_four_digits if card else None,
        "payment_issuer_id": id_str(payment.issuer_id),
        "payment_issuer_name": payment.issuer.name if payment.issuer else None,
        "payment_atm_transfer_reference": payment.atm_transfer_reference,
        "payment_coupon_amount": payment.coupon_amount,
        "payment_installment_amount": payment.installment_amount,
        "payment_deferred_period": payment.deferred_period,
        "payment_authorization_code": payment.authorization_code,
        "payment_operation_type": payment.operation_type,
        "payment_total_paid_amount": payment.total_paid_amount,
        "payment_overpaid_amount": payment.overpaid_amount,
        "raw_payment_data": raw,
    }
