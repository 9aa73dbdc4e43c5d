"""Tests for the templated reply email sent from the enquiry list."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.config import Settings
from app.models.enquiry import Enquiry, EnquiryActivity
from app.services.enquiry_workflow import reply_subject
from app.services.mailer import get_mailer
from app.main import app
from conftest import FakeMailer


async def _rows(session_factory, model):
    async with session_factory() as session:
        return list((await session.execute(select(model))).scalars().all())


@pytest.mark.unit
class TestComposition:
    def test_subject_pluralises(self):
        assert reply_subject("Acme", 1) == "Acme - Enquiry Update (1 item)"
        assert reply_subject("Acme", 3) == "Acme - Enquiry Update (3 items)"


@pytest.mark.api
@pytest.mark.asyncio
class TestSendReply:
    async def test_one_email_covers_every_selected_enquiry(
        self, admin_client: AsyncClient, session_factory, mailer, catalog, make_enquiry, reply_template
    ):
        first = await make_enquiry(catalog["acrylic"], delivery_date="2026-12-01")
        second = await make_enquiry(catalog["neon"])

        response = await admin_client.post(
            "/api/admin-send-reply",
            json={
                "enquiryIds": [first.id, second.id],
                "templateId": reply_template.id,
                "status": "replied",
            },
        )

        assert response.status_code == 200
        assert response.json()["affected"] == 2
        assert len(mailer.sent) == 1
        msg = mailer.sent[0]
        assert msg["To"] == "buyer@acme.test"
        assert msg["Subject"] == "Acme Traders - Enquiry Update (2 items)"
        body = msg.get_content()
        assert body.startswith("Item 1 (Acrylic Sign)\nDear Acme Traders, your Acrylic Sign")
        assert f"({first.id}) ships 2026-12-01." in body
        assert "\n\n---\n\nItem 2 (Neon Sign)\n" in body
        assert f"({second.id}) ships ." in body

        enquiries = await _rows(session_factory, Enquiry)
        assert {e.status for e in enquiries} == {"replied"}
        assert {e.reply_template_id for e in enquiries} == {reply_template.id}
        activity = await _rows(session_factory, EnquiryActivity)
        assert sorted(a.enquiry_id for a in activity) == sorted([first.id, second.id])
        assert {a.action for a in activity} == {"reply_email"}
        assert {a.note for a in activity} == {f"template:{reply_template.id}; status:replied"}

    async def test_mixed_companies_are_rejected_before_sending(
        self, admin_client: AsyncClient, session_factory, mailer, catalog, make_enquiry, reply_template
    ):
        acme = await make_enquiry(catalog["acrylic"])
        globex = await make_enquiry(catalog["neon"], company_name="Globex", email="g@globex.test")

        response = await admin_client.post(
            "/api/admin-send-reply",
            json={"enquiryIds": [acme.id, globex.id], "templateId": reply_template.id, "status": "replied"},
        )

        assert response.status_code == 400
        assert "single customer" in response.json()["error"]["message"]
        assert mailer.sent == []
        assert {e.status for e in await _rows(session_factory, Enquiry)} == {"pending"}
        assert await _rows(session_factory, EnquiryActivity) == []

    async def test_customer_without_email_is_rejected(
        self, admin_client: AsyncClient, mailer, catalog, make_enquiry, reply_template
    ):
        enquiry = await make_enquiry(catalog["acrylic"], company_name="Walk-in", email=None)

        response = await admin_client.post(
            "/api/admin-send-reply",
            json={"enquiryIds": [enquiry.id], "templateId": reply_template.id, "status": "replied"},
        )

        assert response.status_code == 400
        assert mailer.sent == []

    async def test_missing_fields(self, admin_client: AsyncClient, mailer):
        response = await admin_client.post("/api/admin-send-reply", json={"enquiryIds": []})
        assert response.status_code == 400

    async def test_smtp_not_configured(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry, reply_template
    ):
        unconfigured = FakeMailer(Settings(smtp_host="", smtp_user="", smtp_pass=""))
        app.dependency_overrides[get_mailer] = lambda: unconfigured
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            "/api/admin-send-reply",
            json={"enquiryIds": [enquiry.id], "templateId": reply_template.id, "status": "replied"},
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "SMTP_NOT_CONFIGURED"
        assert {e.status for e in await _rows(session_factory, Enquiry)} == {"pending"}

    async def test_transport_failure_leaves_rows_untouched(
        self, admin_client: AsyncClient, session_factory, mailer, catalog, make_enquiry, reply_template
    ):
        mailer.fail = True
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            "/api/admin-send-reply",
            json={"enquiryIds": [enquiry.id], "templateId": reply_template.id, "status": "replied"},
        )

        assert response.status_code == 502
        assert {e.status for e in await _rows(session_factory, Enquiry)} == {"pending"}
        assert await _rows(session_factory, EnquiryActivity) == []
