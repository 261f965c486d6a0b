"""
Shared test fixtures.

HTTP tests run the FastAPI app in-process through httpx's ASGI transport.
"""
import httpx
import pytest
import pytest_asyncio

from app.main import app


SAMPLE_GUIDE = b"""<?xml version="1.0" encoding="UTF-8"?>
<tv generator-info-name="test">
  <channel id="1"><display-name>One</display-name></channel>
  <programme channel="1" id="a" start="20240101120000" stop="20240101130000">
    <title>News</title>
    <desc>Evening news</desc>
    <category>Information</category>
    <icon src="http://example.com/news.png"/>
    <series>
      <series-name>Daily News</series-name>
      <season-num>3</season-num>
      <episode-num>12</episode-num>
    </series>
  </programme>
  <programme channel="2" id="b" start="20240101130000" stop="20240101143000">
    <title>Movie</title>
    <credits/>
  </programme>
</tv>
"""


@pytest.fixture
def sample_guide() -> bytes:
    """Small two-programme XMLTV document."""
    return SAMPLE_GUIDE


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client bound to the application."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
