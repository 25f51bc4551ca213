"""URL router: the `entry` and `search` query parameters."""

import re
import urllib.parse

ENTRY_PARAM = "entry"
SEARCH_PARAM = "search"

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _param(query: str, name: str) -> str | None:
    values = urllib.parse.parse_qs(query.lstrip("?"), keep_blank_values=True).get(name)
    return values[0] if values else None


def parse_entry_id(query: str) -> int | None:
    """Entry id from a query string, read like parseInt (leading integer)."""
    value = _param(query, ENTRY_PARAM)
    if value is None:
        return None
    m = _LEADING_INT_RE.match(value)
    return int(m.group(1)) if m else None


def initial_search(query: str) -> str | None:
    return _param(query, SEARCH_PARAM) or None


def entry_query(entry_id: int) -> str:
    return f"?{ENTRY_PARAM}={entry_id}"


def share_url(origin: str, pathname: str, entry_id: int) -> str:
    return f"{origin}{pathname}{entry_query(entry_id)}"
