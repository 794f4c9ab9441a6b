"""Best-effort extraction of business fields from one listing container.

Each field is an ordered tuple of strategies. A strategy takes the
container and returns a value or None; the first non-empty value wins.
"""

import re
from collections.abc import Callable

from bs4 import Tag

from app.schemas.crawl import BusinessRecord

Strategy = Callable[[Tag], str | None]

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

_ADDRESS_LABELS = ("آدرس", "Address")
_ADDRESS_LABEL_RE = re.compile(r"(?:آدرس|Address)\s*[:：]", re.IGNORECASE)

# Instagram paths that are not profiles
_NON_PROFILE_PATHS = frozenset({"p", "reel", "reels", "stories", "explore", "accounts", "api"})
_INSTAGRAM_MARKER = "instagram.com/"


def clean_text(text: str | None) -> str:
    """Trim and collapse runs of whitespace."""
    if not text:
        return ""
    return " ".join(text.split())


def _first(container: Tag, strategies: tuple[Strategy, ...]) -> str:
    for strategy in strategies:
        value = strategy(container)
        if value:
            return value
    return ""


def _text_of(selector: str) -> Strategy:
    def strategy(container: Tag) -> str | None:
        el = container.select_one(selector)
        return clean_text(el.get_text()) if el else None

    return strategy


def _href_of(selector: str, scheme: str = "") -> Strategy:
    def strategy(container: Tag) -> str | None:
        el = container.select_one(selector)
        if el is None:
            return None
        href = (el.get("href") or "").strip()
        if scheme and href.lower().startswith(scheme):
            href = href[len(scheme):]
        return href.strip()

    return strategy


def _styled(tag: str, *classes: str) -> Strategy:
    """Match a tag carrying all of the given utility classes.

    Class names like ``text-[18px]`` need escaping in CSS selectors, so
    match on the parsed class list instead.
    """

    def strategy(container: Tag) -> str | None:
        for el in container.find_all(tag):
            el_classes = el.get("class") or []
            if all(c in el_classes for c in classes):
                return clean_text(el.get_text())
        return None

    return strategy


def _labelled_address(container: Tag) -> str | None:
    for p in container.find_all("p"):
        text = p.get_text()
        if any(label in text for label in _ADDRESS_LABELS):
            return clean_text(_ADDRESS_LABEL_RE.sub("", text))
    return None


def _mailto(container: Tag) -> str | None:
    el = container.select_one('a[href^="mailto:"]')
    if el is None:
        return None
    return el["href"][len("mailto:"):].split("?")[0].strip()


def _email_in_text(container: Tag) -> str | None:
    match = _EMAIL_RE.search(container.get_text(separator=" "))
    return match.group(0) if match else None


def instagram_handle(link: str) -> str:
    """Turn an Instagram profile URL into ``@handle``.

    Anything that is not a recognizable profile URL is returned unchanged.
    """
    if _INSTAGRAM_MARKER not in link:
        return link
    rest = link.split(_INSTAGRAM_MARKER, 1)[1]
    handle = re.split(r"[/?#]", rest, maxsplit=1)[0]
    if not handle or handle.lower() in _NON_PROFILE_PATHS:
        return link
    return f"@{handle}"


NAME_STRATEGIES: tuple[Strategy, ...] = (
    _text_of('h2[itemprop="name"]'),
    _styled("h2", "text-[18px]", "font-medium"),
    _text_of("h2"),
    _text_of("h1"),
)

PHONE_STRATEGIES: tuple[Strategy, ...] = (
    _href_of('a[itemprop="telephone"]', scheme="tel:"),
    _href_of('a[href^="tel:"]', scheme="tel:"),
)

INSTAGRAM_STRATEGIES: tuple[Strategy, ...] = (
    _href_of('a[itemprop="sameAs"][href*="instagram"]'),
    _href_of('a[href*="instagram.com"]'),
)

DESCRIPTION_STRATEGIES: tuple[Strategy, ...] = (
    _text_of('h3[itemprop="description"]'),
    _styled("h3", "text-[16px]"),
    _text_of("p"),
)

ADDRESS_STRATEGIES: tuple[Strategy, ...] = (
    _text_of('[itemprop="address"]'),
    _text_of("address"),
    _labelled_address,
)

EMAIL_STRATEGIES: tuple[Strategy, ...] = (
    _mailto,
    _text_of('[itemprop="email"]'),
    _email_in_text,
)


def extract_business(container: Tag) -> BusinessRecord | None:
    """Extract one business from a container, or None when it has no name."""
    name = _first(container, NAME_STRATEGIES)
    if not name:
        return None

    instagram = _first(container, INSTAGRAM_STRATEGIES)

    return BusinessRecord(
        name=name,
        phoneNumber=_first(container, PHONE_STRATEGIES),
        instagram=instagram_handle(instagram) if instagram else "",
        address=_first(container, ADDRESS_STRATEGIES),
        email=_first(container, EMAIL_STRATEGIES),
        description=_first(container, DESCRIPTION_STRATEGIES),
    )
