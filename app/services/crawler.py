import asyncio
import logging
import socket
from datetime import datetime, timezone
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
from bs4 import BeautifulSoup

from app.exceptions.custom import (
    CrawlError,
    InvalidURLError,
    TargetNotFoundError,
    TargetTimeoutError,
)
from app.parsers.containers import find_containers
from app.parsers.fields import extract_business
from app.parsers.pagination import resolve_total_pages
from app.schemas.crawl import BusinessRecord, CrawlResult

logger = logging.getLogger(__name__)

_TIMEOUT = 10.0
_PAGE_DELAY = 1.0
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Resolver messages that surface without a socket.gaierror in the chain
_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


def validate_url(url: str | None) -> str:
    """Reject missing or non-absolute http(s) URLs before any I/O."""
    if not url or not url.strip():
        raise InvalidURLError("URL is required")
    url = url.strip()
    parsed = urlsplit(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidURLError("Invalid URL format")
    return url


def build_page_url(url: str, page: int) -> str:
    """Merge ``page=N`` into the URL's query string, replacing any existing one."""
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != "page"
    ]
    query.append(("page", str(page)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def extract_businesses(soup: BeautifulSoup) -> list[BusinessRecord]:
    businesses: list[BusinessRecord] = []
    for container in find_containers(soup):
        record = extract_business(container)
        if record is not None:
            businesses.append(record)
    return businesses


def _is_dns_failure(exc: BaseException) -> bool:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, socket.gaierror):
            return True
        if any(marker in str(current).lower() for marker in _DNS_FAILURE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


class CrawlerService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = _TIMEOUT,
        page_delay: float = _PAGE_DELAY,
        max_pages: int = 0,
        user_agent: str = _USER_AGENT,
    ):
        self._client = client
        self._timeout = timeout
        self._page_delay = page_delay
        self._max_pages = max_pages
        self._user_agent = user_agent

    async def crawl(self, url: str | None, crawl_all_pages: bool = False) -> CrawlResult:
        """Crawl a listing URL and, optionally, every page of its pagination.

        Raises InvalidURLError before any request is made, and maps a
        first-page failure to TargetNotFoundError, TargetTimeoutError or
        CrawlError.
        """
        url = validate_url(url)
        try:
            return await self._do_crawl(url, crawl_all_pages)
        except httpx.TimeoutException as exc:
            logger.warning("Timed out crawling %s: %s", url, exc)
            raise TargetTimeoutError() from exc
        except Exception as exc:
            if isinstance(exc, httpx.ConnectError) and _is_dns_failure(exc):
                logger.warning("Could not resolve host for %s: %s", url, exc)
                raise TargetNotFoundError() from exc
            logger.exception("Crawl failed for %s", url)
            raise CrawlError(
                f"Failed to crawl the website: {str(exc) or type(exc).__name__}"
            ) from exc

    async def _do_crawl(self, url: str, crawl_all_pages: bool) -> CrawlResult:
        soup = await self._fetch_soup(url)
        businesses = extract_businesses(soup)
        pages_crawled = 1
        total_pages = 1

        if crawl_all_pages:
            total_pages = resolve_total_pages(soup)
            last_page = total_pages
            if self._max_pages and last_page > self._max_pages:
                logger.warning(
                    "%s has %d pages, crawling only the first %d",
                    url, total_pages, self._max_pages,
                )
                last_page = self._max_pages

            for page in range(2, last_page + 1):
                if self._page_delay:
                    await asyncio.sleep(self._page_delay)
                page_url = build_page_url(url, page)
                try:
                    page_soup = await self._fetch_soup(page_url)
                    businesses.extend(extract_businesses(page_soup))
                except Exception:
                    logger.exception("Failed to crawl page %d of %s", page, url)
                    continue
                pages_crawled += 1

        logger.info(
            "Crawled %s: %d businesses from %d/%d pages",
            url, len(businesses), pages_crawled, total_pages,
        )
        return CrawlResult(
            url=url,
            businesses=businesses,
            count=len(businesses),
            totalPages=total_pages,
            pagesCrawled=pages_crawled,
            crawledAt=datetime.now(timezone.utc),
        )

    async def _fetch_soup(self, url: str) -> BeautifulSoup:
        resp = await self._client.get(
            url,
            follow_redirects=True,
            timeout=self._timeout,
            headers={"User-Agent": self._user_agent},
        )
        resp.raise_for_status()
        return BeautifulSoup(resp.text, "html.parser")
