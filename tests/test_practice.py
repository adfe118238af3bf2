"""Practice settings and logo endpoints."""

import asyncio
import io

from PIL import Image

from awv.features.practice.models import PracticeSettings
from awv.features.practice.service import PracticeService


UPDATE = {
    "name": "Riverside Family Medicine",
    "address": "400 River Road",
    "city": "Portland",
    "state": "OR",
    "zip_code": "97201",
    "phone": "(503) 555-0100",
    "email": "front.desk@riverside.example.com",
    "npi": "1234567893",
    "primary_color": "#0F766E",
    "office_hours": [{"day": "monday", "open": "08:00", "close": "17:00"}],
}


def image_bytes(size=(1600, 800), mode="RGBA", fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, (20, 120, 200, 128) if mode == "RGBA" else (20, 120, 200)).save(buffer, format=fmt)
    return buffer.getvalue()


async def test_defaults_created_on_first_read(client, staff_headers):
    response = await client.get("/api/practice", headers=staff_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Healthcare Wellness Center"
    assert data["primary_color"] == "#2563EB"
    assert data["logo_url"] is None
    assert data["office_hours"] == []


async def test_concurrent_first_reads_share_one_document(db):
    results = await asyncio.gather(*(PracticeService.get_settings() for _ in range(5)))

    assert len({str(practice.id) for practice in results}) == 1
    assert await PracticeSettings.find_all().count() == 1


async def test_update_settings(client, provider_headers, staff_headers):
    response = await client.put("/api/practice", headers=provider_headers, json=UPDATE)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Riverside Family Medicine"
    assert data["office_hours"][0]["day"] == "monday"

    response = await client.get("/api/practice", headers=staff_headers)
    assert response.json()["primary_color"] == "#0F766E"
    assert await PracticeSettings.find_all().count() == 1


async def test_update_validation(client, admin_headers):
    response = await client.put("/api/practice", headers=admin_headers, json={**UPDATE, "primary_color": "teal"})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "primary_color"

    response = await client.put("/api/practice", headers=admin_headers, json={**UPDATE, "email": "not-an-email"})
    assert response.status_code == 400

    payload = dict(UPDATE)
    del payload["phone"]
    response = await client.put("/api/practice", headers=admin_headers, json=payload)
    assert response.status_code == 400


async def test_staff_cannot_update(client, staff_headers):
    response = await client.put("/api/practice", headers=staff_headers, json=UPDATE)
    assert response.status_code == 403


class TestLogo:
    async def test_upload_downscales_and_converts(self, client, provider_headers):
        files = {"file": ("logo.png", image_bytes(), "image/png")}

        response = await client.post("/api/practice/logo", headers=provider_headers, files=files)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Logo uploaded successfully",
            "logo_url": "/api/practice/logo",
        }

        response = await client.get("/api/practice/logo", headers=provider_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        logo = Image.open(io.BytesIO(response.content))
        assert logo.format == "JPEG"
        assert logo.size == (512, 256)

        practice = (await client.get("/api/practice", headers=provider_headers)).json()
        assert practice["logo_url"] == "/api/practice/logo"
        assert PracticeService.logo_for_report() == response.content

    async def test_small_logo_keeps_size(self, client, provider_headers):
        files = {"file": ("logo.jpg", image_bytes((100, 40), "RGB", "JPEG"), "image/jpeg")}

        await client.post("/api/practice/logo", headers=provider_headers, files=files)

        response = await client.get("/api/practice/logo", headers=provider_headers)
        assert Image.open(io.BytesIO(response.content)).size == (100, 40)

    async def test_rejects_non_image_content(self, client, provider_headers):
        files = {"file": ("logo.png", b"definitely not a png", "image/png")}

        response = await client.post("/api/practice/logo", headers=provider_headers, files=files)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid image file. Please upload a valid image."

    async def test_rejects_wrong_content_type(self, client, provider_headers):
        files = {"file": ("logo.gif", image_bytes(fmt="GIF", mode="RGB"), "image/gif")}

        response = await client.post("/api/practice/logo", headers=provider_headers, files=files)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid file type. Only JPG and PNG images are allowed."

    async def test_staff_cannot_upload(self, client, staff_headers):
        files = {"file": ("logo.png", image_bytes(), "image/png")}
        response = await client.post("/api/practice/logo", headers=staff_headers, files=files)
        assert response.status_code == 403

    async def test_delete_logo(self, client, admin_headers):
        response = await client.delete("/api/practice/logo", headers=admin_headers)
        assert response.status_code == 404

        files = {"file": ("logo.png", image_bytes(), "image/png")}
        await client.post("/api/practice/logo", headers=admin_headers, files=files)

        response = await client.delete("/api/practice/logo", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Logo removed successfully"

        response = await client.get("/api/practice/logo", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "No logo has been uploaded"
        assert PracticeService.logo_for_report() is None
