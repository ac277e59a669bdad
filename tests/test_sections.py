"""Tests for the individual section enrichers."""
import itertools

import pytest

from conftest import BUYER_ID, ORDER_ID, SELLER_ID, make_order
from src.enrich.base import section
from src.enrich.coordinator import SECTIONS
from src.enrich.sections.claims import enrich_claims
from src.enrich.sections.feedback import enrich_feedback
from src.enrich.sections.item import enrich_item
from src.enrich.sections.messages import enrich_messages
from src.enrich.sections.order_details import enrich_order_details
from src.enrich.sections.payment import enrich_payment
from src.enrich.sections.shipping import enrich_shipping
from src.enrich.sections.users import enrich_users
from src.fetch import endpoints
from src.parse.models import SALE_FIELDS
from src.parse.payloads import OrderSummary


def _order(**overrides) -> OrderSummary:
    return OrderSummary.from_api(make_order(**overrides))


def test_sections_own_disjoint_known_fields():
    """No two sections write the same field, and every field exists on the record."""
    for first, second in itertools.combinations(SECTIONS, 2):
        assert not first.fields & second.fields, (first.step, second.step)
    for enrich in SECTIONS:
        assert enrich.fields <= SALE_FIELDS, enrich.step


def test_every_section_keeps_a_raw_snapshot():
    """Each section owns at least one raw_* field."""
    for enrich in SECTIONS:
        assert any(name.startswith("raw_") for name in enrich.fields), enrich.step


@pytest.mark.asyncio
async def test_order_details_maps_first_line_item(fake_ml):
    """Line item pricing and attributes come from the order detail."""
    async with fake_ml.client() as client:
        result = await enrich_order_details(_order(), client)

    assert result.ok
    assert result.fields["item_id"] == "MLB1"
    assert result.fields["item_variation_id"] == "987"
    assert result.fields["item_quantity"] == 2
    assert result.fields["item_sale_fee"] == 8.5
    assert result.fields["item_seller_sku"] == "SKU-1"
    assert result.fields["item_manufacturing_days"] == "5 dias"
    assert result.fields["order_context"] == {"channel": "marketplace"}
    assert result.fields["raw_order_detail_data"]["id"] == ORDER_ID


@pytest.mark.asyncio
async def test_payment_maps_first_payment(fake_ml):
    """Payment details are fetched for the first payment id."""
    async with fake_ml.client() as client:
        result = await enrich_payment(_order(payments=[{"id": 333}, {"id": 334}]), client)

    assert result.ok
    assert result.fields["payment_id"] == "333"
    assert result.fields["payment_status"] == "approved"
    assert result.fields["payment_issuer_name"] == "Banco"
    assert result.fields["payment_card_id"] is None
    assert fake_ml.paths() == ["/payments/333"]


@pytest.mark.asyncio
async def test_payment_without_payments_is_a_no_op(fake_ml):
    """No payments is a legitimate absence, not an error."""
    async with fake_ml.client() as client:
        result = await enrich_payment(_order(payments=[]), client)

    assert result.ok
    assert dict(result.fields) == {}
    assert fake_ml.calls == []


@pytest.mark.asyncio
async def test_shipping_without_shipment_is_a_no_op(fake_ml):
    """Orders without a shipment id skip the shipping call."""
    async with fake_ml.client() as client:
        result = await enrich_shipping(_order(shipping=None), client)

    assert result.ok
    assert dict(result.fields) == {}
    assert fake_ml.calls == []


@pytest.mark.asyncio
async def test_shipping_reads_nested_option_and_logistic(fake_ml):
    """Values nested in shipping_option and logistic are flattened."""
    async with fake_ml.client() as client:
        result = await enrich_shipping(_order(), client)

    assert result.fields["shipping_logistic_type"] == "drop_off"
    assert result.fields["shipping_gross_amount"] == 15.5
    assert result.fields["shipping_tracking_number"] == "BR123"


@pytest.mark.asyncio
async def test_claims_without_claim_keeps_raw_only(fake_ml):
    """No claim on the order leaves claim fields empty without an error."""
    async with fake_ml.client() as client:
        result = await enrich_claims(_order(), client)

    assert result.ok
    assert dict(result.fields) == {"raw_claims_data": {"data": []}}
    request = fake_ml.calls[0]
    assert request.url.params["resource_id"] == str(ORDER_ID)
    assert request.url.params["resource"] == "order"


@pytest.mark.asyncio
async def test_claims_follows_return_and_change(fake_ml):
    """The claim's related return and change are looked up."""
    fake_ml.set(
        "/post-purchase/v1/claims/search",
        {
            "data": [
                {
                    "id": 5001,
                    "status": "opened",
                    "type": "mediations",
                    "related_entities": [{"id": 7001, "type": "return"}, {"id": 8001, "type": "change"}],
                }
            ]
        },
    )
    fake_ml.set("/post-purchase/v1/returns/7001", {"id": 7001, "status": "shipped", "status_money": "retained"})
    fake_ml.set("/post-purchase/v1/changes/8001", {"id": 8001, "status": "pending", "type": "change"})

    async with fake_ml.client() as client:
        result = await enrich_claims(_order(), client)

    assert result.ok
    assert result.fields["claim_id"] == "5001"
    assert result.fields["return_id"] == "7001"
    assert result.fields["return_status_money"] == "retained"
    assert result.fields["change_id"] == "8001"
    assert result.fields["claim_related_entities"][0] == {"id": 7001, "type": "return"}
    assert "/post-purchase/v1/returns/7001" in fake_ml.paths()


@pytest.mark.asyncio
async def test_claims_dependent_failure_fails_whole_section(fake_ml):
    """A failed return lookup leaves no claim fields behind."""
    fake_ml.set(
        "/post-purchase/v1/claims/search",
        {"data": [{"id": 5001, "related_entities": [{"id": 7001, "type": "return"}]}]},
    )
    fake_ml.fail("/post-purchase/v1/returns/7001", status=500)

    async with fake_ml.client() as client:
        result = await enrich_claims(_order(), client)

    assert not result.ok
    assert result.step == "claims_data"
    assert dict(result.fields) == {}
    assert endpoints.RETURN_DETAIL in result.error


@pytest.mark.asyncio
async def test_users_maps_buyer_and_seller(fake_ml):
    """Buyer reputation falls back to buyer_reputation."""
    async with fake_ml.client() as client:
        result = await enrich_users(_order(), client)

    assert result.ok
    assert result.fields["buyer_id"] == str(BUYER_ID)
    assert result.fields["buyer_nickname"] == "COMPRADOR"
    assert result.fields["buyer_reputation"] == {"tags": []}
    assert result.fields["seller_nickname"] == "LOJA"
    assert result.fields["seller_reputation"] == {"level_id": "5_green"}


@pytest.mark.asyncio
async def test_users_partial_failure_is_all_or_nothing(fake_ml):
    """A failed seller lookup drops the buyer fields too."""
    fake_ml.fail(f"/users/{SELLER_ID}", status=403)

    async with fake_ml.client() as client:
        result = await enrich_users(_order(), client)

    assert not result.ok
    assert dict(result.fields) == {}
    assert "403" in result.error


@pytest.mark.asyncio
async def test_item_uses_catalog_price(fake_ml):
    """The catalog buy box price becomes item_global_price."""
    async with fake_ml.client() as client:
        result = await enrich_item(_order(), client)

    assert result.ok
    assert result.fields["item_title"] == "Capa de Banco"
    assert result.fields["item_picture_urls"] == ["https://img.test/1.jpg", "https://img.test/2.jpg"]
    assert result.fields["item_global_price"] == 99.9
    assert fake_ml.paths() == ["/items/MLB1", "/catalog_products/MLBCAT1"]


@pytest.mark.asyncio
async def test_item_skips_catalog_when_not_linked(fake_ml):
    """No catalog_product_id means no second call."""
    fake_ml.set("/items/MLB1", {"id": "MLB1", "title": "Capa"})

    async with fake_ml.client() as client:
        result = await enrich_item(_order(), client)

    assert result.ok
    assert result.fields["item_global_price"] is None
    assert fake_ml.paths() == ["/items/MLB1"]


@pytest.mark.asyncio
async def test_item_catalog_failure_fails_section(fake_ml):
    """A failing catalog lookup fails the item section."""
    fake_ml.fail("/catalog_products/MLBCAT1", status=404)

    async with fake_ml.client() as client:
        result = await enrich_item(_order(), client)

    assert not result.ok
    assert result.step == "item_data"


@pytest.mark.asyncio
async def test_feedback_accepts_object_form(fake_ml):
    """Feedback keyed by sale/purchase is matched by role."""
    fake_ml.set(
        f"/orders/{ORDER_ID}/feedback",
        {"sale": {"id": 10, "role": "seller", "rating": "neutral"}, "purchase": None},
    )

    async with fake_ml.client() as client:
        result = await enrich_feedback(_order(), client)

    assert result.ok
    assert result.fields["feedback_seller_rating"] == "neutral"
    assert "feedback_buyer_rating" not in result.fields


@pytest.mark.asyncio
async def test_feedback_maps_both_roles(fake_ml):
    """List-form feedback fills both roles."""
    async with fake_ml.client() as client:
        result = await enrich_feedback(_order(), client)

    assert result.fields["feedback_buyer_id"] == "1"
    assert result.fields["feedback_buyer_message"] == "ok"
    assert result.fields["feedback_seller_id"] == "2"


@pytest.mark.asyncio
async def test_messages_counts(fake_ml):
    """Counters compare sender ids as strings."""
    async with fake_ml.client() as client:
        result = await enrich_messages(_order(), client)

    assert result.fields["messages_count"] == 2
    assert result.fields["unread_messages_count"] == 1
    assert result.fields["last_message_from"] == str(BUYER_ID)
    assert result.fields["last_message_date"] == "2024-05-02"
    assert result.fields["messages_from_buyer"] == 1
    assert result.fields["messages_from_seller"] == 1


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_a_section_error(fake_ml):
    """A payload that does not fit the schema fails only that section."""
    fake_ml.set(f"/messages/orders/{ORDER_ID}", {"results": "not-a-list"})

    async with fake_ml.client() as client:
        result = await enrich_messages(_order(), client)

    assert not result.ok
    assert "unexpected payload shape" in result.error


@pytest.mark.asyncio
async def test_section_wrapper_captures_unexpected_exceptions(fake_ml):
    """Bugs inside a section never escape it."""
    @section("broken", ("order_context",))
    async def broken(order, client):
        raise KeyError("missing")

    async with fake_ml.client() as client:
        result = await broken(_order(), client)

    assert not result.ok
    assert result.error.startswith("KeyError")


@pytest.mark.asyncio
async def test_section_wrapper_rejects_foreign_fields(fake_ml):
    """Writing another section's field is an error."""
    @section("greedy", ("order_context",))
    async def greedy(order, client):
        return {"order_context": 1, "payment_id": "x"}

    async with fake_ml.client() as client:
        result = await greedy(_order(), client)

    assert not result.ok
    assert "payment_id" in result.error
