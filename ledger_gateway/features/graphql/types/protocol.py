"""GraphQL types for protocol configuration and coin metadata."""

from __future__ import annotations

import strawberry
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.types.objects import ObjectType
from ledger_gateway.infra.ledger.models import CoinMetadata, ProtocolConfig


@strawberry.type(name="ProtocolConfigAttr", description="A protocol parameter and its value")
class ProtocolConfigAttrType:
    key: str
    value: str


@strawberry.type(name="ProtocolConfigFeatureFlag", description="A protocol feature switch")
class ProtocolConfigFeatureFlagType:
    key: str
    value: bool


@strawberry.type(name="ProtocolConfigs", description="Protocol parameters at one protocol version")
class ProtocolConfigsType:
    model: strawberry.Private[ProtocolConfig]

    @classmethod
    def from_model(cls, model: ProtocolConfig) -> ProtocolConfigsType:
        return cls(model=model)

    @strawberry.field
    def protocol_version(self) -> int:
        return int(self.model.protocol_version)

    @strawberry.field(description="Parameters that have a value at this version")
    def configs(self) -> list[ProtocolConfigAttrType]:
        attributes = []
        for key in self.model.attributes:
            value = self.model.attribute_value(key)
            if value is not None:
                attributes.append(ProtocolConfigAttrType(key=key, value=value))
        return attributes

    @strawberry.field
    def feature_flags(self) -> list[ProtocolConfigFeatureFlagType]:
        return [
            ProtocolConfigFeatureFlagType(key=key, value=value)
            for key, value in self.model.feature_flags.items()
        ]

    @strawberry.field(description="One parameter by name")
    def config(self, key: str) -> ProtocolConfigAttrType | None:
        value = self.model.attribute_value(key)
        return ProtocolConfigAttrType(key=key, value=value) if value is not None else None

    @strawberry.field(description="One feature flag by name")
    def feature_flag(self, key: str) -> ProtocolConfigFeatureFlagType | None:
        if key not in self.model.feature_flags:
            return None
        return ProtocolConfigFeatureFlagType(key=key, value=self.model.feature_flags[key])


@strawberry.type(name="CoinMetadata", description="Display metadata of a coin type")
class CoinMetadataType:
    model: strawberry.Private[CoinMetadata]

    @classmethod
    def from_model(cls, model: CoinMetadata) -> CoinMetadataType:
        return cls(model=model)

    @strawberry.field
    def decimals(self) -> int:
        return self.model.decimals

    @strawberry.field
    def name(self) -> str:
        return self.model.name

    @strawberry.field
    def symbol(self) -> str:
        return self.model.symbol

    @strawberry.field
    def description(self) -> str:
        return self.model.description

    @strawberry.field
    def icon_url(self) -> str | None:
        return self.model.icon_url

    @strawberry.field(description="The metadata object")
    async def as_object(self, info: Info[GraphQLContext, None]) -> ObjectType | None:
        if self.model.id is None:
            return None
        return ObjectType.from_model(await info.context.loaders.objects.load(self.model.id))


__all__ = ["CoinMetadataType", "ProtocolConfigsType"]
