"""Bridge from upstream cursor pages to Relay-style connections.

The upstream speaks "give me ``limit`` items after cursor ``C`` and tell me
whether more exist", forward only. ``paginate`` adapts one such page into a
connection result and issues exactly one upstream fetch per call; clients
advance by passing the returned ``end_cursor`` back as ``after``.

Cursors are derived from each item by a caller-supplied ``cursor_of``
function (a natural key, or a composite of several fields), never from the
item's position in the page.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ledger_gateway.core.exceptions import BadRequestException, UnsupportedOperationException

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50
CURSOR_SEPARATOR = ","


@dataclass(frozen=True)
class ConnectionArgs:
    """Relay connection arguments as received from the client."""

    first: int | None = None
    after: str | None = None
    last: int | None = None
    before: str | None = None


@dataclass(frozen=True)
class FetchedPage(Generic[T]):
    """One page as returned by an upstream fetch function."""

    items: list[T]
    next_cursor: Any = None
    has_next_page: bool = False


@dataclass(frozen=True)
class Edge(Generic[T]):
    node: T
    cursor: str


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


@dataclass(frozen=True)
class ConnectionResult(Generic[T]):
    edges: list[Edge[T]]
    page_info: PageInfo

    def map(self, fn: Callable[[T], U]) -> ConnectionResult[U]:
        """Convert every node, keeping cursors and page info."""
        return ConnectionResult(
            edges=[Edge(node=fn(edge.node), cursor=edge.cursor) for edge in self.edges],
            page_info=self.page_info,
        )


def resolve_page_size(
    args: ConnectionArgs,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> tuple[int, bool]:
    """Return ``(limit, inverted)`` for a set of connection arguments.

    ``first`` alone pages forward; ``last`` alone asks for the inverted
    direction. Both or neither fall back to forward with the default size.
    Sizes above ``max_page_size`` are clamped.

    Raises:
        BadRequestException: ``first`` or ``last`` is negative.
    """
    for name, value in (("first", args.first), ("last", args.last)):
        if value is not None and value < 0:
            raise BadRequestException(
                detail=f"'{name}' must be a non-negative integer, got {value}",
                extra={"argument": name, "value": value},
            )

    if args.first is not None and args.last is None:
        limit, inverted = args.first, False
    elif args.last is not None and args.first is None:
        limit, inverted = args.last, True
    else:
        limit, inverted = default_page_size, False

    return min(limit, max_page_size), inverted


async def paginate(
    args: ConnectionArgs,
    fetch_page: Callable[[str | None, int, bool], Awaitable[FetchedPage[T]]],
    cursor_of: Callable[[T], str],
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> ConnectionResult[T]:
    """Fetch one upstream page and shape it as a connection.

    Args:
        args: Client connection arguments.
        fetch_page: ``(cursor, limit, inverted)`` coroutine returning one page.
            ``inverted`` is True when the client asked for ``last``; the
            fetcher decides what that means upstream (usually flipping the
            descending-order flag).
        cursor_of: Pure function deriving an item's cursor.
        default_page_size: Size used when neither/both of first/last is given.
        max_page_size: Upper bound for first/last.

    Raises:
        UnsupportedOperationException: ``before`` was given. No upstream
            call is made.
        BadRequestException: Invalid page size.
    """
    if args.before is not None:
        raise UnsupportedOperationException(
            detail="backward pagination not supported",
            extra={"before": args.before},
        )

    limit, inverted = resolve_page_size(args, default_page_size, max_page_size)
    page = await fetch_page(args.after, limit, inverted)

    items = list(reversed(page.items)) if inverted else list(page.items)
    edges = [Edge(node=item, cursor=cursor_of(item)) for item in items]

    if inverted:
        page_info = PageInfo(
            has_next_page=False,
            has_previous_page=page.has_next_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )
    else:
        page_info = PageInfo(
            has_next_page=page.has_next_page,
            has_previous_page=args.after is not None,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )

    logger.debug(
        "Connection page resolved",
        extra={"limit": limit, "inverted": inverted, "edges": len(edges)},
    )
    return ConnectionResult(edges=edges, page_info=page_info)


async def paginate_sequence(
    args: ConnectionArgs,
    items: Sequence[T],
    cursor_of: Callable[[T], str],
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> ConnectionResult[T]:
    """Apply the ``paginate`` contract to an in-memory list.

    ``after`` must be the cursor of an item in ``items``. With ``last`` it
    continues in reverse order, as an upstream descending fetch would, so
    passing a page's ``start_cursor`` back yields the items before it.

    Raises:
        BadRequestException: ``after`` does not match any item.
    """

    async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[T]:
        ordered = list(reversed(items)) if inverted else list(items)
        start = 0
        if cursor is not None:
            cursors = [cursor_of(item) for item in ordered]
            try:
                start = cursors.index(cursor) + 1
            except ValueError:
                raise BadRequestException(
                    detail=f"Unknown cursor '{cursor}'",
                    extra={"after": cursor},
                ) from None
        window = ordered[start:]
        return FetchedPage(items=window[:limit], has_next_page=len(window) > limit)

    return await paginate(
        args,
        fetch,
        cursor_of,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
    )


def composite_cursor(*parts: object) -> str:
    """Join several fields into one cursor, e.g. ``"12,9vZ...q"``."""
    return CURSOR_SEPARATOR.join(str(part) for part in parts)


def split_composite_cursor(cursor: str, parts: int) -> list[str]:
    """Split a composite cursor, checking it has exactly ``parts`` non-empty fields.

    Raises:
        BadRequestException: Wrong arity or an empty field.
    """
    fields = cursor.split(CURSOR_SEPARATOR)
    if len(fields) != parts or not all(fields):
        raise BadRequestException(
            detail=f"Malformed cursor '{cursor}': expected {parts} comma-separated fields",
            extra={"cursor": cursor},
        )
    return fields


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "ConnectionArgs",
    "ConnectionResult",
    "Edge",
    "FetchedPage",
    "PageInfo",
    "composite_cursor",
    "paginate",
    "paginate_sequence",
    "resolve_page_size",
    "split_composite_cursor",
]
