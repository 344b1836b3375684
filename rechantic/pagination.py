"""
Pagination support for Rechantic.

This module provides the lazy Paginator used by every list operation, and the
PageResult structure for callers that want to drive pagination themselves
(e.g. a web backend handing cursors to a frontend).
"""

import itertools
from collections.abc import Callable, Generator, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._logging import logger, redact_token
from .config import ApiVersion, CursorSource
from .cursor import Cursor

if TYPE_CHECKING:
    from .client import RechargeClient
    from .http import Response

T = TypeVar("T")


@dataclass
class PageResult(Generic[T]):
    """
    Represents a single page of results with pagination cursor.

    Attributes:
        items: Mapped items for this page
        cursor: Tokens for the next/previous pages
        count: Number of items in this page
    """

    items: list[T]
    cursor: Cursor
    count: int

    @property
    def has_more(self) -> bool:
        """Returns True if there are more pages available."""
        return self.cursor.has_next()

    @property
    def next_cursor(self) -> str | None:
        return self.cursor.next


class Paginator(Iterator[T]):
    """
    Lazy, forward-only iterator over a cursor-paginated listing.

    Pages are fetched one at a time, only when the buffered items of the
    previous page have been consumed. Iteration ends when a page comes back
    empty or without a next token. A Paginator is not restartable: build a new
    one to iterate from the start again.

    Usage:
        for subscription in client.subscriptions.list({"status": "active"}):
            ...

        first_ten = client.charges.list().take(10)

    Architectural Note:
    -------------------
    The API version is captured when the Paginator is built, not read from the
    client on every fetch. A Paginator created inside ``client.use_version(...)``
    keeps requesting that version even if it is drained after the block exits.
    """

    def __init__(
        self,
        client: "RechargeClient",
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        mapper: Callable[[dict[str, Any]], T] | None = None,
        items_key: str = "items",
        api_version: ApiVersion | str | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.items_key = items_key
        self.api_version = (
            ApiVersion.parse(api_version) if api_version is not None else client.api_version
        )

        self._connector = client.connector
        self._params: dict[str, Any] = dict(params or {})
        self._mapper = mapper

        # Iteration state
        self._token: str | None = None
        self._cursor: Cursor | None = None
        self._exhausted = False
        self._buffer: list[T] = []
        self._position = 0
        self._fetch_count = 0
        self._yielded = 0
        self._started = False

    @property
    def params(self) -> dict[str, Any]:
        """A copy of the base query parameters."""
        return dict(self._params)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def fetch_count(self) -> int:
        """Number of completed page fetches."""
        return self._fetch_count

    @property
    def cursor(self) -> Cursor | None:
        """Cursor of the most recently fetched page."""
        return self._cursor

    # --- ITERATION ---

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        while True:
            # 1. Serve from the current page
            if self._position < len(self._buffer):
                item = self._buffer[self._position]
                self._position += 1
                self._yielded += 1
                return item

            # 2. Nothing more to fetch
            if self._exhausted:
                raise StopIteration

            # 3. Fetch the next page and try again
            self._fetch_next_page()

    def _fetch_next_page(self) -> None:
        params = dict(self._params)
        if self._token is not None:
            params[self.api_version.cursor_param] = self._token

        if not self._started:
            self._started = True
            logger.info(
                "Starting pagination",
                extra={
                    "endpoint": self.endpoint,
                    "api_version": self.api_version.value,
                    "items_key": self.items_key,
                },
            )

        # Transport errors propagate from here, leaving the state untouched
        # so that the next advance retries the same page.
        response = self._connector.get(self.endpoint, params, api_version=self.api_version)
        self._fetch_count += 1

        items = self._map_items(response.body)
        cursor = self._extract_cursor(response)

        self._buffer = items
        self._position = 0
        self._cursor = cursor

        logger.debug(
            "Fetched page",
            extra={
                "endpoint": self.endpoint,
                "page": self._fetch_count,
                "items": len(items),
                "cursor_hash": redact_token(cursor.next),
            },
        )

        if cursor.has_next() and cursor.next == self._token:
            logger.warning(
                "API returned the same cursor twice, stopping pagination",
                extra={"endpoint": self.endpoint, "cursor_hash": redact_token(cursor.next)},
            )
            self._exhausted = True
        elif not items or not cursor.has_next():
            self._exhausted = True

        self._token = cursor.next

        if self._exhausted:
            logger.info(
                "Pagination finished",
                extra={
                    "endpoint": self.endpoint,
                    "fetches": self._fetch_count,
                    "items": self._yielded + len(items),
                },
            )

    def _map_items(self, body: dict[str, Any]) -> list[T]:
        """Reads the item array and maps each record, preserving source order."""
        raw_items = body.get(self.items_key)
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            logger.warning(
                "Item array is not a list, treating page as empty",
                extra={"endpoint": self.endpoint, "items_key": self.items_key},
            )
            return []

        items: list[T] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                logger.warning(
                    "Skipping non-object item",
                    extra={"endpoint": self.endpoint, "item_type": type(raw).__name__},
                )
                continue
            items.append(self._mapper(raw) if self._mapper is not None else raw)  # type: ignore[arg-type]
        return items

    def _extract_cursor(self, response: "Response") -> Cursor:
        """
        Reads the cursor from the form the requested dialect uses.

        The dialect's own form wins when both are present. When the dialect's form
        is missing from the response, or a Link header carries no cursor at all,
        the other form is used instead.
        """
        link = response.link

        if self.api_version.cursor_source is CursorSource.LINK_HEADER:
            if link is None:
                return Cursor.from_body(response.body)
            cursor = Cursor.from_link_header(link)
            if cursor.next is None and cursor.previous is None:
                if Cursor.body_has_cursor(response.body):
                    logger.debug(
                        "Link header carried no cursor, reading it from the body",
                        extra={"endpoint": self.endpoint},
                    )
                    return Cursor.from_body(response.body)
        else:
            if Cursor.body_has_cursor(response.body) or link is None:
                return Cursor.from_body(response.body)
            cursor = Cursor.from_link_header(link)

        if link and cursor.next is None and cursor.previous is None:
            logger.warning(
                "Link header carried no usable cursor",
                extra={"endpoint": self.endpoint},
            )
        return cursor

    # --- MATERIALIZATION ---

    def all(self) -> list[T]:
        """
        Drains every remaining page into a list.
        WARNING: Can consume high memory for large listings.
        """
        return list(self)

    def first(self) -> T | None:
        """Returns the next item, or None if the sequence is empty."""
        return next(self, None)

    def take(self, limit: int) -> list[T]:
        """
        Returns up to ``limit`` items, crossing page boundaries as needed.
        No page beyond the one holding the last requested item is fetched.
        """
        if limit <= 0:
            return []
        return list(itertools.islice(self, limit))

    def chunk(self, size: int) -> Generator[list[T], None, None]:
        """
        Yields lists of up to ``size`` items (memory efficient for large listings).

        Raises:
            ValueError: If size is lower than 1
        """
        if size < 1:
            raise ValueError("Chunk size must be at least 1")

        while True:
            batch = self.take(size)
            if not batch:
                return
            yield batch
            if len(batch) < size:
                return

    def is_empty(self) -> bool:
        """
        True if no item is left. May fetch a page to find out; the peeked item is
        kept and will still be yielded by the next advance.
        """
        if self._position < len(self._buffer):
            return False
        try:
            next(self)
        except StopIteration:
            return True
        self._position -= 1
        self._yielded -= 1
        return False

    # --- EXPLICIT PAGES ---

    def page(self, cursor: Cursor | str | None = None) -> PageResult[T]:
        """
        Fetches a single page, independently of the iteration state.

        Args:
            cursor: A Cursor or next token from a previous page() call.
                    Pass None for the first page.

        Usage:
            page1 = client.subscriptions.list(limit=50).page()
            if page1.has_more:
                page2 = client.subscriptions.list(limit=50).page(page1.cursor)
        """
        token = cursor.next if isinstance(cursor, Cursor) else cursor

        params = dict(self._params)
        if token:
            params[self.api_version.cursor_param] = token

        logger.info(
            "Fetching single page",
            extra={
                "endpoint": self.endpoint,
                "api_version": self.api_version.value,
                "has_cursor": bool(token),
            },
        )

        response = self._connector.get(self.endpoint, params, api_version=self.api_version)
        self._fetch_count += 1

        items = self._map_items(response.body)
        return PageResult(items=items, cursor=self._extract_cursor(response), count=len(items))
