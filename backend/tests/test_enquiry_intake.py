"""Tests for cart submission → customers, custom products and pending enquiries."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.config import settings
from app.models.category import Category
from app.models.customer import Customer, CustomerSource
from app.models.enquiry import Enquiry
from app.models.product import Product
from app.schemas.cart import CartSubmission, ProductLine
from app.services.enquiry_intake import join_comments


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


def _cart(catalog, **overrides) -> dict:
    body = {
        "company_name": "Acme Traders",
        "email": "buyer@acme.test",
        "contact": "+919800000001",
        "delivery": "2026-11-30",
        "comments": "Urgent",
        "items": [
            {
                "type": "product",
                "product_id": catalog["acrylic"].id,
                "name": "Acrylic Sign",
                "size": "12x18",
                "quantity": 3,
                "material": "Acrylic",
                "comments": "Blue text",
            },
            {"type": "custom", "name": "Lobby Logo Wall", "size": " ", "quantity": 0},
        ],
    }
    body.update(overrides)
    return body


@pytest.mark.unit
class TestHelpers:
    def test_join_comments_skips_empty_parts(self):
        assert join_comments("Urgent", "Blue text") == "Urgent | Blue text"
        assert join_comments("", "Blue text") == "Blue text"
        assert join_comments(None, "  ") is None

    def test_legacy_composite_product_id(self):
        body = CartSubmission.model_validate(
            {
                "company_name": "Acme",
                "items": [{"type": "product", "id": "p-123:1700000000000", "name": "Sign"}],
            }
        )
        line = body.items[0]
        assert isinstance(line, ProductLine)
        assert line.product_id == "p-123"


@pytest.mark.api
@pytest.mark.asyncio
class TestCartEnquiries:
    async def test_creates_one_customer_and_one_pending_enquiry_per_item(
        self, client: AsyncClient, session_factory, catalog
    ):
        response = await client.post("/api/cart-enquiries", json=_cart(catalog))

        assert response.status_code == 200
        data = response.json()
        assert len(data["enquiry_ids"]) == 2
        assert await _count(session_factory, Customer) == 1

        async with session_factory() as session:
            rows = (await session.execute(select(Enquiry))).scalars().all()
            assert len(rows) == 2
            assert {e.status for e in rows} == {"pending"}
            assert {e.customer_id for e in rows} == {data["customer_id"]}

            by_id = {e.id: e for e in rows}
            product_row = by_id[data["enquiry_ids"][0]]
            assert product_row.product_id == catalog["acrylic"].id
            assert product_row.quantity == 3
            assert product_row.comments == "Urgent | Blue text"
            assert product_row.delivery_date == "2026-11-30"

            custom_row = by_id[data["enquiry_ids"][1]]
            assert custom_row.size is None
            assert custom_row.material is None
            assert custom_row.quantity == 1
            assert custom_row.comments == "Urgent"

            customer = await session.get(Customer, data["customer_id"])
            assert customer.source == CustomerSource.WEB
            assert customer.phone == "+919800000001"

    async def test_custom_item_lands_in_custom_orders_category(
        self, client: AsyncClient, session_factory, catalog
    ):
        await client.post("/api/cart-enquiries", json=_cart(catalog))

        async with session_factory() as session:
            category = (
                await session.execute(
                    select(Category).where(Category.name == settings.custom_orders_category)
                )
            ).scalar_one()
            product = (
                await session.execute(select(Product).where(Product.name == "Lobby Logo Wall"))
            ).scalar_one()
            assert product.category_id == category.id
            assert product.is_active

    async def test_empty_company_name_writes_nothing(
        self, client: AsyncClient, session_factory, catalog
    ):
        response = await client.post("/api/cart-enquiries", json=_cart(catalog, company_name="  "))

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Company name is required"
        assert await _count(session_factory, Customer) == 0
        assert await _count(session_factory, Enquiry) == 0

    async def test_empty_cart_writes_nothing(self, client: AsyncClient, session_factory, catalog):
        response = await client.post("/api/cart-enquiries", json=_cart(catalog, items=[]))

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Cart is empty"
        assert await _count(session_factory, Customer) == 0
        assert await _count(session_factory, Enquiry) == 0

    async def test_unknown_product_writes_nothing(
        self, client: AsyncClient, session_factory, catalog
    ):
        cart = _cart(catalog)
        cart["items"][0]["product_id"] = "does-not-exist"

        response = await client.post("/api/cart-enquiries", json=cart)

        assert response.status_code == 404
        assert await _count(session_factory, Customer) == 0
        assert await _count(session_factory, Enquiry) == 0

    async def test_same_company_reuses_customer_and_last_email_wins(
        self, client: AsyncClient, session_factory, catalog
    ):
        first = await client.post("/api/cart-enquiries", json=_cart(catalog))
        second = await client.post(
            "/api/cart-enquiries",
            json=_cart(catalog, email="purchasing@acme.test", contact=""),
        )

        assert first.json()["customer_id"] == second.json()["customer_id"]
        assert first.json()["customer_created"] is True
        assert second.json()["customer_created"] is False
        assert await _count(session_factory, Customer) == 1
        async with session_factory() as session:
            customer = await session.get(Customer, first.json()["customer_id"])
            assert customer.email == "purchasing@acme.test"
            assert customer.phone is None

    async def test_existing_custom_product_is_reused(
        self, client: AsyncClient, session_factory, catalog
    ):
        await client.post("/api/cart-enquiries", json=_cart(catalog))
        await client.post("/api/cart-enquiries", json=_cart(catalog, company_name="Globex"))

        async with session_factory() as session:
            products = (
                await session.execute(select(Product).where(Product.name == "Lobby Logo Wall"))
            ).scalars().all()
            assert len(products) == 1
            enquiries = (
                await session.execute(select(Enquiry).where(Enquiry.product_id == products[0].id))
            ).scalars().all()
            assert len(enquiries) == 2

    async def test_resubmission_is_not_deduplicated(
        self, client: AsyncClient, session_factory, catalog
    ):
        await client.post("/api/cart-enquiries", json=_cart(catalog))
        await client.post("/api/cart-enquiries", json=_cart(catalog))

        assert await _count(session_factory, Enquiry) == 4
        assert await _count(session_factory, Customer) == 1


@pytest.mark.api
@pytest.mark.asyncio
class TestManualEnquiry:
    async def test_manual_enquiry_keeps_existing_contact_details(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        existing = await make_enquiry(catalog["neon"], email="old@acme.test")

        response = await admin_client.post(
            "/api/admin/enquiries/",
            json={
                "company_name": "Acme Traders",
                "email": "new@acme.test",
                "product_id": catalog["acrylic"].id,
                "quantity": 2,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["customer_id"] == existing.customer_id
        assert data["customer"]["email"] == "old@acme.test"
        assert data["product"]["name"] == "Acrylic Sign"
        assert data["status"] == "pending"

    async def test_manual_enquiry_new_customer_is_manual(
        self, admin_client: AsyncClient, session_factory, catalog
    ):
        response = await admin_client.post(
            "/api/admin/enquiries/",
            json={"company_name": "Initech", "product_id": catalog["acrylic"].id},
        )

        async with session_factory() as session:
            customer = await session.get(Customer, response.json()["customer_id"])
            assert customer.source == CustomerSource.MANUAL
