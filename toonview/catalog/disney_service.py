"""
Disney API integration for the catalogue.  This module issues anonymous
requests to the public character endpoint and hands back raw records for
the normaliser.  It exposes two primary functions:

* ``fetch_characters_page()``: blocking request for one page of
  characters, optionally filtered by a name search term.

* ``fetch_characters()``: the same request run on a worker thread so
  the event loop stays responsive, bounded by ``REQUEST_TIMEOUT``.

Only the Python standard library is used for HTTP requests.  Failures
are logged and raised as ``NetworkError``, ``ParseError`` or
``FetchTimeoutError``; there is no retry and no caching, a failed page
is reported to the caller as it happened.
"""

from __future__ import annotations

import asyncio
import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

from ..config import ALLOWED_PAGE_SIZES, settings
from .errors import FetchTimeoutError, NetworkError, ParseError
from .schemas import CharacterPage, PageInfo


logger = logging.getLogger(__name__)


def _http_get_json(url: str, timeout: float) -> Any:
    """Perform an HTTP GET and return the parsed JSON body.

    Non-2xx statuses and transport errors raise ``NetworkError``; a
    body that is not JSON raises ``ParseError``.
    """
    request = urllib.request.Request(
        url,
        headers={
            'User-Agent': settings.USER_AGENT,
            'Accept': 'application/json',
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, 'status', 200)
            if not 200 <= status < 300:
                logger.warning("Disney API request to %s returned status %s", url, status)
                raise NetworkError(f"Network error (status {status})", status=status)
            data = response.read().decode('utf-8', errors='replace')
    except urllib.error.HTTPError as exc:
        logger.warning("Disney API request to %s returned status %s", url, exc.code)
        raise NetworkError(f"Network error (status {exc.code})", status=exc.code) from exc
    except http.client.HTTPException as exc:
        logger.error("Broken HTTP response from %s: %r", url, exc)
        raise NetworkError(f"Network error: {type(exc).__name__}") from exc
    except TimeoutError as exc:
        logger.error("Timed out fetching %s", url)
        raise FetchTimeoutError(f"Request timed out after {timeout}s") from exc
    except (urllib.error.URLError, OSError) as exc:
        if isinstance(getattr(exc, 'reason', None), TimeoutError):
            logger.error("Timed out fetching %s", url)
            raise FetchTimeoutError(f"Request timed out after {timeout}s") from exc
        logger.error("Error fetching %s: %s", url, exc)
        raise NetworkError(f"Network error: {exc}") from exc
    try:
        return json.loads(data)
    except ValueError as exc:
        logger.error("Malformed JSON from %s: %s", url, exc)
        raise ParseError("Response body is not valid JSON") from exc


def clamp_page(page: Any) -> int:
    try:
        return max(1, int(page))
    except (TypeError, ValueError):
        return 1


def clamp_page_size(page_size: Any) -> int:
    try:
        size = int(page_size)
    except (TypeError, ValueError):
        return settings.DEFAULT_PAGE_SIZE
    return size if size in ALLOWED_PAGE_SIZES else settings.DEFAULT_PAGE_SIZE


def build_characters_url(
    page: int = 1,
    page_size: int = 50,
    search_term: Optional[str] = None,
    base_url: Optional[str] = None,
) -> str:
    """Compose the character listing URL for one page."""
    params: Dict[str, Any] = {
        'page': clamp_page(page),
        'pageSize': clamp_page_size(page_size),
    }
    term = (search_term or '').strip()
    if term:
        params['name'] = term
    return f"{base_url or settings.DISNEY_API_URL}?{urllib.parse.urlencode(params)}"


def _page_info(payload: Dict[str, Any]) -> PageInfo:
    info = payload.get('info')
    if not isinstance(info, dict):
        return PageInfo()
    count = info.get('count')
    total_pages = info.get('totalPages')
    previous_page = info.get('previousPage')
    next_page = info.get('nextPage')
    return PageInfo(
        count=count if isinstance(count, int) and not isinstance(count, bool) else None,
        total_pages=total_pages if isinstance(total_pages, int) and not isinstance(total_pages, bool) else None,
        previous_page=previous_page if isinstance(previous_page, str) else None,
        next_page=next_page if isinstance(next_page, str) else None,
    )


def fetch_characters_page(
    page: int = 1,
    page_size: int = 50,
    search_term: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CharacterPage:
    """Fetch one page of raw character records.

    A ``data`` field that is missing or not a list yields an empty
    page rather than an error.
    """
    url = build_characters_url(page, page_size, search_term)
    payload = _http_get_json(url, settings.REQUEST_TIMEOUT if timeout is None else timeout)
    if not isinstance(payload, dict):
        logger.warning("Unexpected payload type %s from %s", type(payload).__name__, url)
        return CharacterPage()
    data = payload.get('data')
    records = data if isinstance(data, list) else []
    logger.info("Fetched %d characters (page=%s, pageSize=%s)", len(records), page, page_size)
    return CharacterPage(records=records, info=_page_info(payload))


async def fetch_characters(
    page: int = 1,
    page_size: int = 50,
    search_term: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CharacterPage:
    """Non-blocking variant of ``fetch_characters_page()``.

    The request runs on a worker thread; waiting longer than
    ``timeout`` seconds raises ``FetchTimeoutError``. The worker itself
    is left to finish on its own since urllib offers no cancellation.
    """
    limit = settings.REQUEST_TIMEOUT if timeout is None else timeout
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(fetch_characters_page, page, page_size, search_term, limit),
            timeout=limit,
        )
    except FetchTimeoutError:
        raise
    except asyncio.TimeoutError as exc:
        logger.error("Timed out waiting for page %s after %ss", page, limit)
        raise FetchTimeoutError(f"Request timed out after {limit}s") from exc
