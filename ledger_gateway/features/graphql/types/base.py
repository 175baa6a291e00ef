"""Base GraphQL types shared by every feature type.

Provides:
- PageInfoType: Relay page metadata
- Node: interface for types with a global ``id``
- Global id helpers: ``encode_global_id`` / ``decode_global_id``
- Connection argument aliases used by every plural field
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING, Annotated

import strawberry

from ledger_gateway.core.exceptions import BadRequestException
from ledger_gateway.features.graphql.pagination import ConnectionArgs

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult


FirstArg = Annotated[
    int | None,
    strawberry.argument(description="Number of items to return (forward)"),
]
AfterArg = Annotated[
    str | None,
    strawberry.argument(description="Cursor to continue after (exclusive)"),
]
LastArg = Annotated[
    int | None,
    strawberry.argument(description="Number of items to return from the end"),
]
BeforeArg = Annotated[
    str | None,
    strawberry.argument(description="Not supported; the upstream pages forward only"),
]


def connection_args(
    first: int | None = None,
    after: str | None = None,
    last: int | None = None,
    before: str | None = None,
) -> ConnectionArgs:
    return ConnectionArgs(first=first, after=after, last=last, before=before)


@strawberry.type(name="PageInfo", description="Pagination metadata following GraphQL Relay specification")
class PageInfoType:
    has_previous_page: bool = strawberry.field(description="Whether items exist before this page")
    has_next_page: bool = strawberry.field(description="Whether more items exist")
    start_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the last item",
    )

    @classmethod
    def from_result(cls, result: ConnectionResult) -> PageInfoType:
        info = result.page_info
        return cls(
            has_previous_page=info.has_previous_page,
            has_next_page=info.has_next_page,
            start_cursor=info.start_cursor,
            end_cursor=info.end_cursor,
        )


def encode_global_id(type_name: str, key: str) -> str:
    """Encode ``TypeName:key`` as an opaque global id."""
    return base64.b64encode(f"{type_name}:{key}".encode()).decode("ascii")


def decode_global_id(global_id: str) -> tuple[str, str]:
    """Decode a global id into ``(type_name, key)``.

    Raises:
        BadRequestException: The id is not base64 of ``TypeName:key``.
    """
    try:
        decoded = base64.b64decode(global_id, validate=True).decode()
    except (binascii.Error, UnicodeDecodeError):
        raise BadRequestException(
            detail=f"Malformed global id '{global_id}'",
            extra={"id": global_id},
        ) from None
    type_name, sep, key = decoded.partition(":")
    if not sep or not type_name or not key:
        raise BadRequestException(
            detail=f"Malformed global id '{global_id}'",
            extra={"id": global_id},
        )
    return type_name, key


@strawberry.interface(name="Node", description="An object with a globally unique id")
class Node:
    """Implementers set ``node_type`` and define ``node_key()``."""

    node_type = "Node"

    def node_key(self) -> str:
        raise NotImplementedError

    @strawberry.field(description="Opaque global identifier")
    def id(self) -> strawberry.ID:
        return strawberry.ID(encode_global_id(self.node_type, self.node_key()))


__all__ = [
    "AfterArg",
    "BeforeArg",
    "FirstArg",
    "LastArg",
    "Node",
    "PageInfoType",
    "connection_args",
    "decode_global_id",
    "encode_global_id",
]
