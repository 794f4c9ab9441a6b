import re

from bs4 import BeautifulSoup, Tag

# Tried in order; the first selector that matches wins
_PAGINATION_SELECTORS = (
    'nav[aria-label*="صفحه"]',
    'nav[aria-label*="pagination" i]',
    "nav.pagination",
    ".pagination",
)

_PAGE_PARAM_RE = re.compile(r"[?&]page=(\d+)", re.ASCII)
_LEADING_INT_RE = re.compile(r"\s*(\d+)", re.ASCII)

# Persian (U+06F0-U+06F9) and Arabic-Indic (U+0660-U+0669) digits
_DIGITS = str.maketrans(
    "۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩",
    "01234567890123456789",
)


def normalize_digits(text: str) -> str:
    return text.translate(_DIGITS)


def parse_page_number(text: str | None) -> int | None:
    """Parse the leading integer of a link label, accepting non-Latin digits."""
    if not text:
        return None
    match = _LEADING_INT_RE.match(normalize_digits(text))
    return int(match.group(1)) if match else None


def page_param(href: str | None) -> int | None:
    if not href:
        return None
    match = _PAGE_PARAM_RE.search(href)
    return int(match.group(1)) if match else None


def find_pagination(soup: BeautifulSoup) -> list[Tag]:
    for selector in _PAGINATION_SELECTORS:
        found = soup.select(selector)
        if found:
            return found
    return []


def resolve_total_pages(soup: BeautifulSoup) -> int:
    """Return the highest page number reachable from a listing's first page."""
    navs = find_pagination(soup)
    if not navs:
        return 1

    for nav in navs:
        last = nav.select_one('a[rel~="last"]')
        if last is None:
            continue
        number = page_param(last.get("href"))
        if number is None:
            number = parse_page_number(last.get_text())
        return max(number or 1, 1)

    highest = 1
    for nav in navs:
        for link in nav.find_all("a", href=True):
            number = page_param(link["href"])
            if number is not None and number > highest:
                highest = number
    return highest
