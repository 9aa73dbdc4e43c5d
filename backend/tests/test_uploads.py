"""Tests for image uploads."""

import pytest
from httpx import AsyncClient

from app.config import settings
from app.routers.uploads import upload_extension

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    return tmp_path


@pytest.mark.unit
def test_extension_falls_back_to_content_type():
    assert upload_extension("logo.PNG", "image/png") == "png"
    assert upload_extension(None, "image/jpeg") in {"jpg", "jpeg", "jpe"}


@pytest.mark.api
@pytest.mark.asyncio
class TestUpload:
    async def test_image_is_stored_under_a_fresh_name(self, client: AsyncClient, upload_dir):
        response = await client.post(
            "/api/upload", files={"file": ("shop front.png", PNG, "image/png")}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["name"] == f"{data['file_id']}.png"
        assert data["url"] == f"/uploads/{data['name']}"
        assert (upload_dir / data["name"]).read_bytes() == PNG

    async def test_non_image_is_rejected(self, client: AsyncClient, upload_dir):
        response = await client.post(
            "/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"
        assert list(upload_dir.iterdir()) == []

    async def test_missing_file(self, client: AsyncClient, upload_dir):
        response = await client.post("/api/upload", data={"other": "x"})
        assert response.status_code == 400
