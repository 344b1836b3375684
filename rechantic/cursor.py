"""
Cursor extraction for Rechantic.

The two API dialects carry their pagination tokens differently:

    2021-01:  Link: <https://api.rechargeapps.com/charges?cursor=abc>; rel="next"
    2021-11:  {"charges": [...], "next_cursor": "abc", "previous_cursor": null}

Both are parsed into the same immutable Cursor. Parsing never raises: metadata
that cannot be read means "no such page".
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

# <url>; rel="next"  (quotes optional, extra params after rel ignored)
_LINK_ENTRY = re.compile(r'<([^<>]+)>\s*;\s*rel\s*=\s*"?(next|previous|prev)"?', re.IGNORECASE)

_BODY_KEYS = ("next_cursor", "next", "previous_cursor", "previous")


def _as_token(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _cursor_from_url(url: str) -> str | None:
    """Extracts the percent-decoded 'cursor' query parameter from a URL."""
    try:
        query = urlsplit(url.strip()).query
    except ValueError:
        return None
    values = parse_qs(query).get("cursor")
    return values[0] if values else None


@dataclass(frozen=True)
class Cursor:
    """
    Pagination tokens for the pages around the current one.

    Attributes:
        next: Token of the next page (None if this is the last page)
        previous: Token of the previous page (None if this is the first page)
    """

    next: str | None = None
    previous: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "Cursor":
        """
        Reads 'next_cursor' (or 'next') and 'previous_cursor' (or 'previous')
        from a decoded response body. Missing, null or non-string values yield None.
        """
        if not isinstance(body, Mapping):
            return cls()

        next_token = body.get("next_cursor")
        if next_token is None:
            next_token = body.get("next")

        previous_token = body.get("previous_cursor")
        if previous_token is None:
            previous_token = body.get("previous")

        return cls(next=_as_token(next_token), previous=_as_token(previous_token))

    @classmethod
    def from_link_header(cls, header: str | None) -> "Cursor":
        """
        Parses a Link header value of the form
        ``<url>; rel="next", <url>; rel="previous"``.

        The token is the 'cursor' query parameter of each URL. Relations that are
        missing, or whose URL has no cursor, yield None. Input that does not follow
        the grammar yields an empty Cursor.
        """
        if not isinstance(header, str) or not header:
            return cls()

        found: dict[str, str | None] = {}
        for url, rel in _LINK_ENTRY.findall(header):
            rel = rel.lower()
            if rel == "prev":
                rel = "previous"
            # First entry for a relation wins
            if found.get(rel) is None:
                found[rel] = _cursor_from_url(url)

        return cls(next=found.get("next"), previous=found.get("previous"))

    @staticmethod
    def body_has_cursor(body: Any) -> bool:
        """True if the body carries any cursor key at all, even with a null value."""
        return isinstance(body, Mapping) and any(key in body for key in _BODY_KEYS)

    def has_next(self) -> bool:
        return self.next is not None and self.next != ""

    def has_previous(self) -> bool:
        return self.previous is not None and self.previous != ""

    def to_dict(self) -> dict[str, str]:
        """Returns the set tokens using the 2021-11 body keys."""
        data = {}
        if self.next is not None:
            data["next_cursor"] = self.next
        if self.previous is not None:
            data["previous_cursor"] = self.previous
        return data
