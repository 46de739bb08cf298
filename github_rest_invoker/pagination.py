"""RFC 5988 Link header helpers for GitHub pagination."""

import re
from urllib.parse import parse_qs, urlsplit

_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel="?([^",]+)"?')


def parse_link_header(value: str | None) -> dict[str, str]:
    """Map each rel (``next``, ``last``, ...) to its URL.

    Returns an empty dict when the header is missing or has no usable entries.
    """
    if not value:
        return {}
    links = {}
    for url, rels in _LINK_RE.findall(value):
        # A single entry may carry several space-separated rels
        for rel in rels.split():
            links.setdefault(rel, url)
    return links


def estimate_page_count(link: str | None) -> int | None:
    """Read the page number of the ``rel="last"`` URL, if it has one."""
    last = parse_link_header(link).get("last")
    if not last:
        return None
    pages = parse_qs(urlsplit(last).query).get("page")
    if not pages:
        return None
    try:
        return int(pages[0])
    except ValueError:
        return None


def should_report_progress(total_pages: int | None, threshold: int) -> bool:
    """Progress is advisory: on only for a known page count at/over a non-zero threshold."""
    if threshold <= 0 or total_pages is None:
        return False
    return total_pages >= threshold
