from bs4 import BeautifulSoup, Tag

# Repeating listing markup seen on directory sites
_LISTING_SELECTOR = '[itemtype*="schema.org"], article, .business-item, .listing-item'

_STRUCTURED_NAME = 'h2[itemprop="name"]'
_TEL_LINK = 'a[href^="tel:"]'


def find_containers(soup: BeautifulSoup) -> list[Tag]:
    """Return the elements that each look like one business listing.

    Falls back to body children holding both a structured name and a
    phone link, then to the whole body as a single-business page.
    """
    containers = soup.select(_LISTING_SELECTOR)
    if containers:
        return containers

    body = soup.body or soup
    containers = [
        child
        for child in body.find_all(recursive=False)
        if child.select_one(_STRUCTURED_NAME) and child.select_one(_TEL_LINK)
    ]
    if containers:
        return containers

    return [body]
