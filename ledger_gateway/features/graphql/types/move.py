"""GraphQL types for Move packages, modules, structs and functions.

Provides:
- MoveType / OpenMoveType: concrete and signature types
- MovePackageType, MoveModuleType (Node), MoveStructType, MoveFunctionType (Node)
- Connection types for modules, structs and functions
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.dataloaders import MoveFunctionRecord
from ledger_gateway.features.graphql.pagination import composite_cursor
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    Node,
    PageInfoType,
    connection_args,
)
from ledger_gateway.features.graphql.types.scalars import SuiAddress
from ledger_gateway.infra.ledger.models import (
    AbilitySet,
    NormalizedField,
    NormalizedModule,
    NormalizedStruct,
    StructTypeParameter,
)

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult
    from ledger_gateway.features.graphql.types.objects import ObjectType


def split_type_arguments(type_repr: str) -> tuple[str, list[str]]:
    """Split ``0x2::coin::Coin<0x2::sui::SUI>`` into its name and type arguments."""
    start = type_repr.find("<")
    if start == -1 or not type_repr.endswith(">"):
        return type_repr, []

    arguments: list[str] = []
    depth = 0
    current = ""
    for char in type_repr[start + 1 : -1]:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            arguments.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        arguments.append(current.strip())
    return type_repr[:start], arguments


def render_signature(signature: Any) -> str:
    """Render a normalized Move signature as source-like text."""
    if isinstance(signature, str):
        return signature.lower()
    if not isinstance(signature, dict) or len(signature) != 1:
        return str(signature)

    [(tag, inner)] = signature.items()
    if tag == "Struct":
        name = f"{inner['address']}::{inner['module']}::{inner['name']}"
        arguments = inner.get("typeArguments") or []
        if arguments:
            name += "<" + ", ".join(render_signature(arg) for arg in arguments) + ">"
        return name
    if tag == "Vector":
        return f"vector<{render_signature(inner)}>"
    if tag == "Reference":
        return f"&{render_signature(inner)}"
    if tag == "MutableReference":
        return f"&mut {render_signature(inner)}"
    if tag == "TypeParameter":
        return f"${inner}"
    return str(signature)


@strawberry.enum(name="MoveAbility", description="Abilities a Move type can have")
class MoveAbility(Enum):
    COPY = "Copy"
    DROP = "Drop"
    KEY = "Key"
    STORE = "Store"


@strawberry.enum(name="MoveVisibility", description="Visibility of a Move function")
class MoveVisibility(Enum):
    PUBLIC = "Public"
    PRIVATE = "Private"
    FRIEND = "Friend"


@strawberry.enum(name="MoveReference", description="Reference kind of a signature type")
class MoveReference(Enum):
    IMMUTABLE = "Reference"
    MUTABLE = "MutableReference"


def _abilities(ability_set: AbilitySet) -> list[MoveAbility]:
    return [MoveAbility(ability) for ability in ability_set.abilities]


@strawberry.type(name="MoveType", description="A concrete Move type")
class MoveType:
    repr: str = strawberry.field(description="Canonical type string")

    @strawberry.field(description="Type name without type arguments")
    def type_name(self) -> str:
        return split_type_arguments(self.repr)[0]

    @strawberry.field(description="Type arguments, outermost first")
    def type_parameters(self) -> list[MoveType]:
        return [MoveType(repr=argument) for argument in split_type_arguments(self.repr)[1]]


@strawberry.type(name="OpenMoveType", description="A Move signature type, possibly generic")
class OpenMoveType:
    signature: JSON = strawberry.field(description="Normalized signature as reported upstream")

    @strawberry.field(description="Signature rendered as source text")
    def repr(self) -> str:
        return render_signature(self.signature)

    @strawberry.field(description="Reference kind when the signature is a reference")
    def ref(self) -> MoveReference | None:
        if isinstance(self.signature, dict) and len(self.signature) == 1:
            tag = next(iter(self.signature))
            if tag in ("Reference", "MutableReference"):
                return MoveReference(tag)
        return None


@strawberry.type(name="MoveField")
class MoveFieldType:
    name: str
    type: OpenMoveType

    @classmethod
    def from_model(cls, model: NormalizedField) -> MoveFieldType:
        return cls(name=model.name, type=OpenMoveType(signature=model.type_))


@strawberry.type(name="MoveStructTypeParameter")
class MoveStructTypeParameterType:
    constraints: list[MoveAbility]
    is_phantom: bool

    @classmethod
    def from_model(cls, model: StructTypeParameter) -> MoveStructTypeParameterType:
        return cls(constraints=_abilities(model.constraints), is_phantom=model.is_phantom)


@strawberry.type(name="MoveFunctionTypeParameter")
class MoveFunctionTypeParameterType:
    constraints: list[MoveAbility]


@strawberry.type(name="MovePackage", description="A published Move package")
class MovePackageType:
    address: SuiAddress = strawberry.field(description="Package address")

    @strawberry.field(description="One module of this package by name")
    async def module(self, info: Info[GraphQLContext, None], name: str) -> MoveModuleType:
        model = await info.context.loaders.move_modules.load(composite_cursor(self.address, name))
        return MoveModuleType.from_model(model)

    @strawberry.field(description="Modules of this package ordered by name")
    async def module_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> MoveModuleConnection:
        ctx = info.context
        args = connection_args(first, after, last, before)
        modules = await ctx.client.get_normalized_move_modules_by_package(self.address)
        ordered = [modules[name] for name in sorted(modules)]
        for model in ordered:
            ctx.loaders.move_modules.prime(composite_cursor(self.address, model.name), model)
        result = await ctx.paginate_sequence(args, ordered, lambda model: model.name)
        return MoveModuleConnection.from_result(result.map(MoveModuleType.from_model))

    @strawberry.field(description="The package as an object")
    async def as_object(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated["ObjectType", strawberry.lazy("ledger_gateway.features.graphql.types.objects")]:
        from ledger_gateway.features.graphql.types.objects import ObjectType

        return ObjectType.from_model(await info.context.loaders.objects.load(self.address))


@strawberry.type(name="MoveModule", description="A normalized Move module")
class MoveModuleType(Node):
    node_type = "MoveModule"

    model: strawberry.Private[NormalizedModule]

    def node_key(self) -> str:
        return composite_cursor(self.model.address, self.model.name)

    @classmethod
    def from_model(cls, model: NormalizedModule) -> MoveModuleType:
        return cls(model=model)

    @strawberry.field(description="Package the module belongs to")
    def package(self) -> MovePackageType:
        return MovePackageType(address=self.model.address)

    @strawberry.field
    def name(self) -> str:
        return self.model.name

    @strawberry.field(description="Bytecode file format version")
    def file_format_version(self) -> int:
        return self.model.file_format_version

    @strawberry.field(description="Modules allowed to call this module's friend functions")
    async def friends(self, info: Info[GraphQLContext, None]) -> list[MoveModuleType]:
        keys = [composite_cursor(friend.address, friend.name) for friend in self.model.friends]
        loaded = await info.context.loaders.move_modules.load_many(keys)
        return [MoveModuleType.from_model(model) for model in loaded if isinstance(model, NormalizedModule)]

    @strawberry.field(description="One struct declared by this module")
    def struct(self, name: str) -> MoveStructType | None:
        model = self.model.structs.get(name)
        return MoveStructType(module_model=self.model, name=name, model=model) if model else None

    @strawberry.field(description="Structs declared by this module ordered by name")
    async def struct_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> MoveStructConnection:
        structs = [
            MoveStructType(module_model=self.model, name=name, model=self.model.structs[name])
            for name in sorted(self.model.structs)
        ]
        result = await info.context.paginate_sequence(
            connection_args(first, after, last, before), structs, lambda struct: struct.name
        )
        return MoveStructConnection.from_result(result)

    @strawberry.field(description="One exposed function of this module")
    def function(self, name: str) -> MoveFunctionType | None:
        model = self.model.exposed_functions.get(name)
        if model is None:
            return None
        return MoveFunctionType.from_record(
            MoveFunctionRecord(
                package=self.model.address, module=self.model.name, name=name, function=model
            )
        )

    @strawberry.field(description="Exposed functions of this module ordered by name")
    async def function_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> MoveFunctionConnection:
        records = [
            MoveFunctionRecord(
                package=self.model.address,
                module=self.model.name,
                name=name,
                function=self.model.exposed_functions[name],
            )
            for name in sorted(self.model.exposed_functions)
        ]
        for record in records:
            info.context.loaders.move_functions.prime(record.key, record)
        result = await info.context.paginate_sequence(
            connection_args(first, after, last, before), records, lambda record: record.name
        )
        return MoveFunctionConnection.from_result(result.map(MoveFunctionType.from_record))


@strawberry.type(name="MoveStruct", description="A struct declaration")
class MoveStructType:
    module_model: strawberry.Private[NormalizedModule]
    name: str
    model: strawberry.Private[NormalizedStruct]

    @strawberry.field(description="Module declaring the struct")
    def module(self) -> MoveModuleType:
        return MoveModuleType.from_model(self.module_model)

    @strawberry.field
    def abilities(self) -> list[MoveAbility]:
        return _abilities(self.model.abilities)

    @strawberry.field
    def type_parameters(self) -> list[MoveStructTypeParameterType]:
        return [MoveStructTypeParameterType.from_model(param) for param in self.model.type_parameters]

    @strawberry.field
    def fields(self) -> list[MoveFieldType]:
        return [MoveFieldType.from_model(field) for field in self.model.fields]


@strawberry.type(name="MoveFunction", description="A normalized Move function")
class MoveFunctionType(Node):
    node_type = "MoveFunction"

    record: strawberry.Private[MoveFunctionRecord]

    def node_key(self) -> str:
        return self.record.key

    @classmethod
    def from_record(cls, record: MoveFunctionRecord) -> MoveFunctionType:
        return cls(record=record)

    @strawberry.field(description="Module declaring the function")
    async def module(self, info: Info[GraphQLContext, None]) -> MoveModuleType:
        key = composite_cursor(self.record.package, self.record.module)
        return MoveModuleType.from_model(await info.context.loaders.move_modules.load(key))

    @strawberry.field
    def name(self) -> str:
        return self.record.name

    @strawberry.field
    def visibility(self) -> MoveVisibility:
        return MoveVisibility(self.record.function.visibility)

    @strawberry.field
    def is_entry(self) -> bool:
        return self.record.function.is_entry

    @strawberry.field
    def type_parameters(self) -> list[MoveFunctionTypeParameterType]:
        return [
            MoveFunctionTypeParameterType(constraints=_abilities(param))
            for param in self.record.function.type_parameters
        ]

    @strawberry.field
    def parameters(self) -> list[OpenMoveType]:
        return [OpenMoveType(signature=param) for param in self.record.function.parameters]

    @strawberry.field(name="return")
    def return_(self) -> list[OpenMoveType]:
        return [OpenMoveType(signature=value) for value in self.record.function.return_]


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="MoveModuleEdge")
class MoveModuleEdge:
    node: MoveModuleType
    cursor: str


@strawberry.type(name="MoveModuleConnection")
class MoveModuleConnection:
    edges: list[MoveModuleEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[MoveModuleType]) -> MoveModuleConnection:
        return cls(
            edges=[MoveModuleEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


@strawberry.type(name="MoveStructEdge")
class MoveStructEdge:
    node: MoveStructType
    cursor: str


@strawberry.type(name="MoveStructConnection")
class MoveStructConnection:
    edges: list[MoveStructEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[MoveStructType]) -> MoveStructConnection:
        return cls(
            edges=[MoveStructEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


@strawberry.type(name="MoveFunctionEdge")
class MoveFunctionEdge:
    node: MoveFunctionType
    cursor: str


@strawberry.type(name="MoveFunctionConnection")
class MoveFunctionConnection:
    edges: list[MoveFunctionEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[MoveFunctionType]) -> MoveFunctionConnection:
        return cls(
            edges=[MoveFunctionEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


__all__ = [
    "MoveAbility",
    "MoveFunctionConnection",
    "MoveFunctionType",
    "MoveModuleConnection",
    "MoveModuleType",
    "MovePackageType",
    "MoveReference",
    "MoveStructType",
    "MoveType",
    "MoveVisibility",
    "OpenMoveType",
    "render_signature",
    "split_type_arguments",
]
