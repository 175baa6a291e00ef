"""GraphQL server configuration settings.

Controls the GraphQL endpoint, IDE, pagination sizes and loader batching.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GraphQLIDE = Literal["graphiql", "apollo-sandbox", "pathfinder", False]


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Example: GRAPHQL_PATH=/graphql, GRAPHQL_DEFAULT_PAGE_SIZE=20
    """

    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path",
    )
    graphql_ide: GraphQLIDE = Field(
        default="graphiql",
        description="GraphQL IDE to serve on GET, or false to disable",
    )

    # Upstream requires an explicit limit on every page request
    default_page_size: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Page size used when a connection gets neither first nor last",
    )
    max_page_size: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Upper bound applied to first/last",
    )

    max_batch_size: int | None = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum keys per upstream batch call; None means unbounded",
    )

    introspection_enabled: bool = Field(
        default=True,
        description="Allow schema introspection queries",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def validate_page_sizes(self) -> GraphQLSettings:
        if self.default_page_size > self.max_page_size:
            msg = (
                f"default_page_size ({self.default_page_size}) must not exceed "
                f"max_page_size ({self.max_page_size})"
            )
            raise ValueError(msg)
        return self
