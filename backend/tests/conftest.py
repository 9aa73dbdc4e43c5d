"""Pytest configuration and fixtures for the sign shop backend.

Every test gets a fresh in-memory SQLite database (aiosqlite) with the
full schema, the app's `get_db` dependency pointed at it, a recording
mailer in place of SMTP, and a cart store under tmp_path.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///:memory:")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.jwt import create_session_token
from app.auth.password import hash_password
from app.config import Settings, settings
from app.database import Base, get_db
from app.main import app
from app.middleware.exceptions import MailTransportError
from app.models.category import Category
from app.models.customer import Customer
from app.models.enquiry import Enquiry
from app.models.product import Product
from app.models.template import Template
from app.models.user import User
from app.services.cart import JsonFileCartStorage, get_cart_storage
from app.services.mailer import Mailer, get_mailer

ADMIN_PASSWORD = "correct-horse-battery"


# ── Outbound mail ────────────────────────────────────────────────

class FakeMailer(Mailer):
    """Records messages instead of talking to an SMTP server."""

    def __init__(self, config: Settings | None = None):
        super().__init__(
            config
            or Settings(
                smtp_host="smtp.test",
                smtp_user="shop@test",
                smtp_pass="secret",
                smtp_from="shop@test",
            )
        )
        self.sent = []
        self.fail = False

    def send(self, msg) -> None:
        self.ensure_configured()
        if self.fail:
            raise MailTransportError("Failed to send email: connection refused")
        self.sent.append(msg)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


# ── Database ─────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Open sessions with `async with session_factory() as s:`."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def cart_storage(tmp_path) -> JsonFileCartStorage:
    return JsonFileCartStorage(tmp_path / "carts")


@pytest_asyncio.fixture
async def client(session_factory, mailer, cart_storage) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with DB, mail and cart storage overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_cart_storage] = lambda: cart_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def admin_user(session_factory) -> User:
    async with session_factory() as session:
        user = User(username="admin", password_hash=hash_password(ADMIN_PASSWORD))
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return create_session_token(admin_user.id, admin_user.username)


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_token: str) -> AsyncClient:
    """The same client, carrying a valid admin session cookie."""
    client.cookies.set(settings.session_cookie_name, admin_token)
    return client


@pytest_asyncio.fixture
async def catalog(session_factory) -> dict:
    """One category with an active top seller, a plain product and an inactive one."""
    async with session_factory() as session:
        signs = Category(name="Signboards", description="Shop and office signs")
        session.add(signs)
        await session.flush()
        acrylic = Product(
            name="Acrylic Sign",
            category_id=signs.id,
            sizes=["12x18", "24x36"],
            materials=["Acrylic"],
            top_seller=True,
        )
        neon = Product(name="Neon Sign", category_id=signs.id)
        retired = Product(name="Tin Plate", category_id=signs.id, is_active=False)
        session.add_all([acrylic, neon, retired])
        await session.commit()
        return {"category": signs, "acrylic": acrylic, "neon": neon, "retired": retired}


@pytest_asyncio.fixture
async def reply_template(session_factory) -> Template:
    async with session_factory() as session:
        template = Template(
            type="customer",
            title="Quotation ready",
            content="Dear {customer_name}, your {product_name} ({quotation_id}) ships {delivery_date}.",
        )
        session.add(template)
        await session.commit()
        return template


async def _make_enquiry(
    session_factory,
    product: Product,
    company_name: str = "Acme Traders",
    email: str | None = "buyer@acme.test",
    **fields,
) -> Enquiry:
    """Insert an enquiry (and its customer, if new) directly."""
    async with session_factory() as session:
        customer = (
            await session.execute(select(Customer).where(Customer.company_name == company_name))
        ).scalar_one_or_none()
        if not customer:
            customer = Customer(company_name=company_name, email=email)
            session.add(customer)
            await session.flush()
        enquiry = Enquiry(customer_id=customer.id, product_id=product.id, **fields)
        session.add(enquiry)
        await session.commit()
        return enquiry


@pytest.fixture
def make_enquiry(session_factory):
    """`await make_enquiry(product, company_name=..., **enquiry_fields)`"""

    async def _make(product: Product, company_name: str = "Acme Traders", **kwargs) -> Enquiry:
        return await _make_enquiry(session_factory, product, company_name, **kwargs)

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "auth: Admin session tests")
