"""
Unit tests for upload endpoints.

Tests: GET /, GET /health, POST /submit, POST /api/guide
"""
import pytest
from unittest.mock import patch

from app.config import settings
from app.exceptions import StreamReadError


def _files(data: bytes, name: str = "guide.xml"):
    return {"xml": (name, data, "text/xml")}


class TestIndex:
    """Tests for GET / endpoint."""

    @pytest.mark.asyncio
    async def test_renders_upload_form(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'name="xml"' in response.text


class TestHealth:
    """Tests for GET /health endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_ok(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestSubmit:
    """Tests for POST /submit endpoint."""

    @pytest.mark.asyncio
    async def test_renders_summary(self, async_client, sample_guide):
        """Uploaded guide is summarised with file metadata and broadcasts."""
        response = await async_client.post("/submit", files=_files(sample_guide, "sample.xml"))

        assert response.status_code == 200
        body = response.text
        assert "sample.xml" in body
        assert "text/xml" in body
        assert "Broadcasts: 2" in body
        assert "Channels: 2" in body
        assert "News" in body
        assert "2024-01-01 12:00:00" in body
        assert "Daily News" in body

    @pytest.mark.asyncio
    async def test_renders_humanized_size(self, async_client, sample_guide):
        response = await async_client.post("/submit", files=_files(sample_guide))
        assert f"Size: {len(sample_guide)} Bytes" in response.text

    @pytest.mark.asyncio
    async def test_missing_file_returns_400(self, async_client):
        response = await async_client.post("/submit", data={"other": "value"})
        assert response.status_code == 400
        assert "Error parsing form." in response.text

    @pytest.mark.asyncio
    async def test_bad_timestamp_returns_generic_error(self, async_client):
        data = b'<tv><programme channel="1" start="2024-01-01" stop="20240101130000"/></tv>'
        response = await async_client.post("/submit", files=_files(data))
        assert response.status_code == 400
        assert "Could not parse upload." in response.text
        assert "2024-01-01" not in response.text

    @pytest.mark.asyncio
    async def test_malformed_xml_returns_generic_error(self, async_client):
        response = await async_client.post("/submit", files=_files(b"<tv><programme></tv>"))
        assert response.status_code == 400
        assert "Could not parse upload." in response.text

    @pytest.mark.asyncio
    async def test_oversized_upload_returns_413(self, async_client, sample_guide):
        with patch.object(settings, "max_upload_size_bytes", 10):
            response = await async_client.post("/submit", files=_files(sample_guide))
        assert response.status_code == 413
        assert "text/html" in response.headers["content-type"]
        assert "Upload exceeds 10 bytes." in response.text

    @pytest.mark.asyncio
    async def test_read_failure_returns_generic_error(self, async_client, sample_guide):
        """A failing upload read is a decode error, not a server error."""
        with patch(
            "app.services.upload_service.decode_guide",
            side_effect=StreamReadError("Failed to read upload: connection reset"),
        ):
            response = await async_client.post("/submit", files=_files(sample_guide))

        assert response.status_code == 400
        assert "Could not parse upload." in response.text


class TestGuideJSON:
    """Tests for POST /api/guide endpoint."""

    @pytest.mark.asyncio
    async def test_returns_guide_with_xml_names(self, async_client, sample_guide):
        response = await async_client.post("/api/guide", files=_files(sample_guide))

        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data["programme"]] == ["a", "b"]
        first = data["programme"][0]
        assert first["title"] == {"text": "News"}
        assert first["desc"] == {"text": "Evening news"}
        assert first["start"] == "2024-01-01T12:00:00Z"
        assert data["programme"][1]["credits"] == {}
        assert data["programme"][1]["desc"] is None

    @pytest.mark.asyncio
    async def test_empty_guide(self, async_client):
        response = await async_client.post("/api/guide", files=_files(b"<tv></tv>"))
        assert response.status_code == 200
        assert response.json() == {"programme": []}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data, code", [
        (b"<tv><programme></tv>", "MALFORMED_XML"),
        (b'<tv><programme start="202401011200"/></tv>', "TIMESTAMP_FORMAT"),
        (b"<tv><programme><title><b>x</b></title></programme></tv>", "SCHEMA_MISMATCH"),
    ])
    async def test_decode_errors_return_code(self, async_client, data, code):
        response = await async_client.post("/api/guide", files=_files(data))
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == code

    @pytest.mark.asyncio
    async def test_missing_file_returns_422(self, async_client):
        response = await async_client.post("/api/guide", data={"other": "value"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_read_failure_returns_stream_read_code(self, async_client, sample_guide):
        with patch(
            "app.services.upload_service.decode_guide",
            side_effect=StreamReadError("Failed to read upload: connection reset"),
        ):
            response = await async_client.post("/api/guide", files=_files(sample_guide))

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "STREAM_READ"

    @pytest.mark.asyncio
    async def test_oversized_upload_returns_413(self, async_client, sample_guide):
        with patch.object(settings, "max_upload_size_bytes", 10):
            response = await async_client.post("/api/guide", files=_files(sample_guide))
        assert response.status_code == 413


class TestRequestSizeLimit:
    """Tests for the Content-Length check that runs before body parsing."""

    @pytest.mark.asyncio
    async def test_rejects_large_request_before_routing(self, async_client):
        body = b"<tv>" + b" " * (200 * 1024) + b"</tv>"

        with patch.object(settings, "max_upload_size_bytes", 10), \
                patch("app.routers.decode_upload") as mock_decode:
            response = await async_client.post("/submit", files=_files(body))

        assert response.status_code == 413
        assert response.json() == {"detail": "Upload exceeds 10 bytes."}
        mock_decode.assert_not_called()

    @pytest.mark.asyncio
    async def test_allows_request_within_limit(self, async_client, sample_guide):
        response = await async_client.post("/submit", files=_files(sample_guide))
        assert response.status_code == 200
