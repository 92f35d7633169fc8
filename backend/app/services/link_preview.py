"""Fetch Open Graph style metadata for URLs shared in messages."""

from __future__ import annotations

import ipaddress
import logging
import re
from html.parser import HTMLParser

import httpx

from app.config import get_settings
from app.schemas.messages import LinkPreview

logger = logging.getLogger(__name__)

settings = get_settings()

HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})
_URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:!?)]}'\""


def extract_first_url(text: str) -> str | None:
    """Return the first ``http(s)://`` URL in ``text``, if any."""

    match = _URL_PATTERN.search(text)
    if match is None:
        return None
    return match.group(0).rstrip(_TRAILING_PUNCTUATION) or None


def is_public_url(url: str) -> bool:
    """Reject non-HTTP URLs and hosts that point at internal infrastructure.

    Only literal addresses are checked; host names are not resolved.
    """

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    if parsed.scheme not in {"http", "https"} or not parsed.host:
        return False

    host = parsed.host.lower().rstrip(".")
    if host == "localhost" or host.endswith(".localhost") or host.endswith(".local"):
        return False
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return True
    return not (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    )


class _MetadataParser(HTMLParser):
    """Collect ``<meta>`` tags and the document title."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.meta: dict[str, str] = {}
        self.title_parts: list[str] = []
        self._in_title = False
        self._title_done = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "title" and not self._title_done:
            self._in_title = True
            return
        if tag != "meta":
            return
        values = {name.lower(): value for name, value in attrs if value is not None}
        key = values.get("property") or values.get("name")
        content = values.get("content")
        if key and content is not None:
            self.meta.setdefault(key.strip().lower(), content)

    def handle_endtag(self, tag: str) -> None:
        if tag == "title" and self._in_title:
            self._in_title = False
            self._title_done = True

    def handle_data(self, data: str) -> None:
        if self._in_title:
            self.title_parts.append(data)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    collapsed = " ".join(value.split())
    return collapsed or None


def parse_link_preview(document: str, final_url: str) -> LinkPreview:
    """Build a preview from an HTML document fetched from ``final_url``."""

    parser = _MetadataParser()
    parser.feed(document)
    parser.close()
    meta = parser.meta

    def first(*keys: str) -> str | None:
        for key in keys:
            value = _clean(meta.get(key))
            if value:
                return value
        return None

    title = first("og:title", "twitter:title") or _clean("".join(parser.title_parts))
    description = first("og:description", "twitter:description", "description")
    image = first("og:image", "og:image:url", "twitter:image", "twitter:image:src")
    if image:
        image = str(httpx.URL(final_url).join(image))

    return LinkPreview(url=final_url, title=title, description=description, image=image)


async def _read_limited(response: httpx.Response, limit: int) -> bytes | None:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        return None
    body = bytearray()
    async for chunk in response.aiter_bytes():
        body.extend(chunk)
        if len(body) > limit:
            return None
    return bytes(body)


async def _fetch(client: httpx.AsyncClient, url: str) -> LinkPreview | None:
    headers = {
        "User-Agent": settings.link_preview_user_agent,
        "Accept": "text/html,application/xhtml+xml",
    }
    current = url
    for _ in range(settings.link_preview_max_redirects + 1):
        if not is_public_url(current):
            logger.debug("Refusing link preview for %s", current)
            return None
        async with client.stream(
            "GET",
            current,
            headers=headers,
            follow_redirects=False,
            timeout=settings.link_preview_timeout_seconds,
        ) as response:
            if response.is_redirect:
                location = response.headers.get("location")
                if not location:
                    return None
                current = str(response.url.join(location))
                continue
            if response.status_code >= 400:
                logger.debug("Link preview for %s failed with HTTP %s", current, response.status_code)
                return None

            content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
            if content_type not in HTML_CONTENT_TYPES:
                logger.debug("Link preview for %s skipped: content type %r", current, content_type)
                return None

            body = await _read_limited(response, settings.link_preview_max_bytes)
            if body is None:
                logger.debug("Link preview for %s skipped: body too large", current)
                return None
            document = body.decode(response.encoding or "utf-8", errors="replace")
            return parse_link_preview(document, str(response.url))

    logger.debug("Link preview for %s exceeded redirect limit", url)
    return None


async def fetch_link_preview(url: str, *, client: httpx.AsyncClient | None = None) -> LinkPreview | None:
    """Return preview metadata for ``url`` or ``None`` when it cannot be built."""

    if not is_public_url(url):
        return None
    try:
        if client is not None:
            return await _fetch(client, url)
        async with httpx.AsyncClient(timeout=settings.link_preview_timeout_seconds) as owned:
            return await _fetch(owned, url)
    except (httpx.HTTPError, httpx.InvalidURL, LookupError, UnicodeError) as exc:
        logger.debug("Link preview for %s failed: %s", url, exc)
        return None


__all__ = ["extract_first_url", "fetch_link_preview", "is_public_url", "parse_link_preview"]
