"""Tests for link preview fetching and HTML metadata parsing."""

from __future__ import annotations

import httpx
import pytest

from app.services import link_preview
from app.services.link_preview import (
    extract_first_url,
    fetch_link_preview,
    is_public_url,
    parse_link_preview,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


OG_PAGE = """
<html><head>
<title>Fallback title</title>
<meta property="og:title" content="Open &amp; Graph">
<meta property="og:description" content="  A   description  ">
<meta property="og:image" content="/img/cover.png">
<meta name="twitter:title" content="Twitter title">
</head><body>ignored</body></html>
"""


def html_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, headers={"content-type": "text/html; charset=utf-8"}, text=body)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_extract_first_url_strips_trailing_punctuation():
    assert extract_first_url("see (https://example.com/page).") == "https://example.com/page"
    assert extract_first_url("no links here") is None


@pytest.mark.parametrize(
    "url",
    [
        "http://localhost/admin",
        "http://127.0.0.1:8000/",
        "http://192.168.1.10/",
        "http://10.0.0.5/",
        "http://[::1]/",
        "http://169.254.169.254/latest/meta-data",
        "http://printer.local/",
        "ftp://example.com/file",
        "not a url",
    ],
)
def test_internal_or_invalid_urls_are_blocked(url):
    assert is_public_url(url) is False


def test_public_urls_are_allowed():
    assert is_public_url("https://example.com/article")
    assert is_public_url("http://93.184.216.34/")


def test_open_graph_wins_and_entities_are_unescaped():
    preview = parse_link_preview(OG_PAGE, "https://example.com/posts/1")

    assert preview.url == "https://example.com/posts/1"
    assert preview.title == "Open & Graph"
    assert preview.description == "A description"
    assert preview.image == "https://example.com/img/cover.png"


def test_twitter_card_used_when_open_graph_missing():
    page = """
    <head>
      <meta name="twitter:title" content="Card title">
      <meta name="twitter:description" content="Card text">
      <meta name="twitter:image" content="https://cdn.example.com/card.jpg">
    </head>
    """

    preview = parse_link_preview(page, "https://example.com/")

    assert preview.title == "Card title"
    assert preview.description == "Card text"
    assert preview.image == "https://cdn.example.com/card.jpg"


def test_title_and_meta_description_fallback():
    page = "<head><title> Plain\n page </title><meta name=\"description\" content=\"Summary\"></head>"

    preview = parse_link_preview(page, "https://example.com/")

    assert preview.title == "Plain page"
    assert preview.description == "Summary"
    assert preview.image is None


@pytest.mark.anyio("asyncio")
async def test_fetch_sends_user_agent_and_parses_page():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return html_response(OG_PAGE)

    async with mock_client(handler) as client:
        preview = await fetch_link_preview("https://example.com/posts/1", client=client)

    assert preview is not None
    assert preview.title == "Open & Graph"
    assert seen[0].headers["user-agent"] == "Mozilla/5.0 (compatible; LinkPreviewBot/1.0)"


@pytest.mark.anyio("asyncio")
async def test_fetch_follows_redirects_and_reports_final_url():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/short":
            return httpx.Response(301, headers={"location": "/articles/final"})
        return html_response("<title>Final</title><meta property=\"og:image\" content=\"pic.png\">")

    async with mock_client(handler) as client:
        preview = await fetch_link_preview("https://example.com/short", client=client)

    assert preview is not None
    assert preview.url == "https://example.com/articles/final"
    assert preview.title == "Final"
    assert preview.image == "https://example.com/articles/pic.png"


@pytest.mark.anyio("asyncio")
async def test_fetch_refuses_redirect_into_private_network():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "example.com":
            return httpx.Response(302, headers={"location": "http://127.0.0.1/internal"})
        raise AssertionError("internal address must not be requested")

    async with mock_client(handler) as client:
        assert await fetch_link_preview("https://example.com/", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_fetch_gives_up_after_too_many_redirects():
    def handler(request: httpx.Request) -> httpx.Response:
        hop = int(request.url.params.get("hop", "0"))
        return httpx.Response(302, headers={"location": f"/loop?hop={hop + 1}"})

    async with mock_client(handler) as client:
        assert await fetch_link_preview("https://example.com/loop", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_non_html_responses_are_ignored():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "application/json"}, text="{}")

    async with mock_client(handler) as client:
        assert await fetch_link_preview("https://example.com/api", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_error_status_returns_none():
    async with mock_client(lambda request: html_response("<title>gone</title>", 404)) as client:
        assert await fetch_link_preview("https://example.com/missing", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_oversized_documents_are_skipped(monkeypatch):
    monkeypatch.setattr(link_preview.settings, "link_preview_max_bytes", 64)

    async with mock_client(lambda request: html_response("<title>big</title>" + "x" * 500)) as client:
        assert await fetch_link_preview("https://example.com/big", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_network_errors_return_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        assert await fetch_link_preview("https://example.com/", client=client) is None


@pytest.mark.anyio("asyncio")
async def test_blocked_url_is_never_requested():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with mock_client(handler) as client:
        assert await fetch_link_preview("http://localhost:8080/", client=client) is None
