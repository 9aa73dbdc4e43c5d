"""Tests for enquiry status transitions, replies, bulk actions, listing and export."""

import csv
import io
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.middleware.exceptions import AppError, ValidationFailed
from app.models.enquiry import Enquiry, EnquiryActivity, EnquiryStatus
from app.services.enquiry_workflow import (
    ALLOWED_TRANSITIONS,
    parse_quotation_amount,
    parse_status,
)


async def _activity(session_factory, enquiry_id: str) -> list[EnquiryActivity]:
    async with session_factory() as session:
        result = await session.execute(
            select(EnquiryActivity).where(EnquiryActivity.enquiry_id == enquiry_id)
        )
        return list(result.scalars().all())


@pytest.mark.unit
class TestStatusRules:
    def test_every_status_may_follow_every_other(self):
        statuses = {s.value for s in EnquiryStatus}
        assert set(ALLOWED_TRANSITIONS) == statuses
        assert all(targets == statuses for targets in ALLOWED_TRANSITIONS.values())

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationFailed):
            parse_status("shipped")

    def test_quotation_amount_parsing(self):
        assert parse_quotation_amount("1250.5") == Decimal("1250.50")
        assert parse_quotation_amount("   ") is None
        assert parse_quotation_amount(None) is None
        with pytest.raises(AppError) as exc:
            parse_quotation_amount("twelve")
        assert exc.value.status_code == 422


@pytest.mark.api
@pytest.mark.asyncio
class TestSingleTransitions:
    async def test_completed_without_invoice_is_refused(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            f"/api/admin/enquiries/{enquiry.id}/status", json={"status": "completed"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVOICE_REQUIRED"
        async with session_factory() as session:
            assert (await session.get(Enquiry, enquiry.id)).status == "pending"
        assert await _activity(session_factory, enquiry.id) == []

    async def test_completed_with_invoice_persists_and_logs_once(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            f"/api/admin/enquiries/{enquiry.id}/status",
            json={"status": "completed", "invoice_number": "INV-1001"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["invoice_number"] == "INV-1001"
        activity = await _activity(session_factory, enquiry.id)
        assert len(activity) == 1
        assert activity[0].action == "status_change"
        assert "INV-1001" in activity[0].note

    async def test_any_status_can_follow_any_other(
        self, admin_client: AsyncClient, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"], status="cancelled")

        for target in ("wip", "po_pending", "pending"):
            response = await admin_client.post(
                f"/api/admin/enquiries/{enquiry.id}/status", json={"status": target}
            )
            assert response.status_code == 200
            assert response.json()["status"] == target

    async def test_invalid_status_is_rejected(
        self, admin_client: AsyncClient, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"])
        response = await admin_client.post(
            f"/api/admin/enquiries/{enquiry.id}/status", json={"status": "shipped"}
        )
        assert response.status_code == 400

    async def test_unknown_enquiry(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/admin/enquiries/nope/status", json={"status": "wip"}
        )
        assert response.status_code == 404

    async def test_reply_records_template_amount_and_activity(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry, reply_template
    ):
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            f"/api/admin/enquiries/{enquiry.id}/reply",
            json={"template_id": reply_template.id, "quotation_amount": "4500"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "replied"
        assert data["reply_template_id"] == reply_template.id
        assert Decimal(str(data["quotation_amount"])) == Decimal("4500.00")
        activity = await _activity(session_factory, enquiry.id)
        assert [a.action for a in activity] == ["reply"]
        assert reply_template.id in activity[0].note

    async def test_reply_with_invalid_amount(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.post(
            f"/api/admin/enquiries/{enquiry.id}/reply", json={"quotation_amount": "12,00x"}
        )

        assert response.status_code == 422
        async with session_factory() as session:
            assert (await session.get(Enquiry, enquiry.id)).status == "pending"


@pytest.mark.api
@pytest.mark.asyncio
class TestBulkActions:
    async def test_bulk_status_bypasses_invoice_requirement(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        first = await make_enquiry(catalog["acrylic"])
        second = await make_enquiry(catalog["neon"])

        response = await admin_client.post(
            "/api/admin/enquiries/bulk-status",
            json={"ids": [first.id, second.id, "missing"], "status": "completed"},
        )

        assert response.status_code == 200
        assert response.json()["affected"] == 2
        async with session_factory() as session:
            rows = (await session.execute(select(Enquiry))).scalars().all()
            assert {e.status for e in rows} == {"completed"}
            assert {e.invoice_number for e in rows} == {None}

    async def test_bulk_delete_removes_enquiries_and_activity(
        self, admin_client: AsyncClient, session_factory, catalog, make_enquiry
    ):
        doomed = await make_enquiry(catalog["acrylic"])
        kept = await make_enquiry(catalog["neon"])
        await admin_client.post(
            f"/api/admin/enquiries/{doomed.id}/status", json={"status": "wip"}
        )

        response = await admin_client.post(
            "/api/admin/enquiries/bulk-delete", json={"ids": [doomed.id]}
        )

        assert response.json()["affected"] == 1
        async with session_factory() as session:
            remaining = (await session.execute(select(Enquiry.id))).scalars().all()
            assert remaining == [kept.id]
            orphans = await session.scalar(select(func.count(EnquiryActivity.id)))
            assert orphans == 0

    async def test_delete_single(self, admin_client: AsyncClient, catalog, make_enquiry):
        enquiry = await make_enquiry(catalog["acrylic"])

        response = await admin_client.delete(f"/api/admin/enquiries/{enquiry.id}")

        assert response.status_code == 204
        missing = await admin_client.get(f"/api/admin/enquiries/{enquiry.id}")
        assert missing.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestListingAndExport:
    async def test_list_newest_first_with_filters(
        self, admin_client: AsyncClient, catalog, make_enquiry
    ):
        now = datetime.utcnow()
        old = await make_enquiry(catalog["acrylic"], created_at=now - timedelta(days=2))
        new = await make_enquiry(
            catalog["neon"], company_name="Globex", email="g@globex.test",
            created_at=now, status="wip",
        )

        everything = (await admin_client.get("/api/admin/enquiries/")).json()
        assert [e["id"] for e in everything["items"]] == [new.id, old.id]
        assert everything["total"] == 2
        assert everything["items"][0]["customer"]["company_name"] == "Globex"

        wip = (await admin_client.get("/api/admin/enquiries/?status=wip")).json()
        assert [e["id"] for e in wip["items"]] == [new.id]

        searched = (await admin_client.get("/api/admin/enquiries/?search=acrylic")).json()
        assert [e["id"] for e in searched["items"]] == [old.id]

    async def test_activity_oldest_first(
        self, admin_client: AsyncClient, catalog, make_enquiry
    ):
        enquiry = await make_enquiry(catalog["acrylic"])
        for target in ("wip", "artwork_sent"):
            await admin_client.post(
                f"/api/admin/enquiries/{enquiry.id}/status", json={"status": target}
            )

        response = await admin_client.get(f"/api/admin/enquiries/{enquiry.id}/activity")

        notes = [a["note"] for a in response.json()]
        assert len(notes) == 2
        assert notes[0].endswith("->wip")
        assert notes[1].endswith("->artwork_sent")

    async def test_csv_export_quotes_awkward_values(
        self, admin_client: AsyncClient, catalog, make_enquiry
    ):
        await make_enquiry(catalog["acrylic"], comments='Needs "gold", not silver')
        await make_enquiry(catalog["neon"], comments="Plain")

        response = await admin_client.get("/api/admin/enquiries/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip("\n").split("\n")
        assert len(lines) == 3
        assert '"Needs ""gold"", not silver"' in response.text
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0][0] == "Enquiry ID"
        assert 'Needs "gold", not silver' in {r[10] for r in rows[1:]}
