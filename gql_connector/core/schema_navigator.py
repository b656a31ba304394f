"""Introspection-driven schema discovery.

The navigator never loads the whole schema. It asks for the root
operation lists once, then fetches single ``__type`` definitions on
demand, one per level the caller actually walks. Schema graphs are often
cyclic, so walking further than asked would not terminate.
"""

import logging
from collections.abc import Sequence
from typing import Any

from .arguments import ArgumentTypeMapper
from .errors import SchemaResolutionError
from .executor import RunSession
from .ir import ArgumentDescriptor, FieldInfo, OperationInfo, ResolvedOperation, ResolvedType
from .query_builder import Argument, Node, Query
from .type_resolver import describe_field, type_ref_selection, type_kind, unwrap_base_type

logger = logging.getLogger(__name__)

ROOT_TYPE_FIELDS = {"query": "queryType", "mutation": "mutationType"}


def _input_value_selection(name: str) -> Node:
    return Node(name, children=["name", "description", "defaultValue", type_ref_selection()])


def _field_selection() -> Node:
    return Node("fields", children=[
        "name",
        "description",
        _input_value_selection("args"),
        type_ref_selection(),
    ])


def operations_query(operation_type: str) -> Query:
    """``{ __schema { queryType { fields {...} } } }`` (or mutationType)."""
    root_field = ROOT_TYPE_FIELDS[operation_type]
    document = Node("IntrospectOperations").set_operation("query").add_child(
        Node("__schema", children=[Node(root_field, children=["name", _field_selection()])])
    )
    return Query(document)


def type_query(type_name: str) -> Query:
    """Full definition of one named type."""
    document = Node("IntrospectType").set_operation("query").add_child(
        Node("__type", arguments=[Argument("name", type_name)], children=[
            "name",
            "kind",
            "description",
            Node("interfaces", children=["name"]),
            _field_selection(),
            Node("enumValues", children=["name"]),
        ])
    )
    return Query(document)


class SchemaNavigator:
    """Discovers operations and types of one endpoint for the length of a run.

    Root operation lists and fetched types are cached on the instance,
    so a navigator should not outlive the run that created it.
    """

    def __init__(self, session: RunSession):
        self.session = session
        self.settings = session.settings
        self._operations: dict[str, list[dict[str, Any]]] = {}
        self._types: dict[str, ResolvedType] = {}

    async def _operation_fields(self, operation_type: str) -> list[dict[str, Any]]:
        if operation_type not in ROOT_TYPE_FIELDS:
            raise ValueError(f"Unsupported operation type: {operation_type}")
        if operation_type not in self._operations:
            data = await self.session.execute_data(operations_query(operation_type))
            root = (data.get("__schema") or {}).get(ROOT_TYPE_FIELDS[operation_type])
            # A schema without mutations reports mutationType: null
            self._operations[operation_type] = list((root or {}).get("fields") or [])
            logger.debug("Found %d %s operations", len(self._operations[operation_type]), operation_type)
        return self._operations[operation_type]

    async def list_operations(self, operation_type: str = "query") -> list[tuple[str, str | None]]:
        """(name, description) for every query or mutation, in schema order."""
        fields = await self._operation_fields(operation_type)
        return [(f["name"], f.get("description")) for f in fields]

    async def discover(self) -> list[OperationInfo]:
        """All operations, queries flagged readable and mutations writable."""
        result = [
            OperationInfo(name=name, description=description, readable=True)
            for name, description in await self.list_operations("query")
        ]
        result.extend(
            OperationInfo(name=name, description=description, writable=True)
            for name, description in await self.list_operations("mutation")
        )
        return result

    async def describe_operation(self, name: str) -> tuple[str, dict[str, Any]]:
        """Find a query (or else a mutation) by exact name.

        Returns:
            (operation_type, raw field definition)

        Raises:
            SchemaResolutionError: If neither a query nor a mutation has that name
        """
        for operation_type in ("query", "mutation"):
            for field_def in await self._operation_fields(operation_type):
                if field_def.get("name") == name:
                    return operation_type, field_def
        raise SchemaResolutionError(name, f"Operation not found: {name}")

    async def get_type(self, type_name: str) -> ResolvedType:
        """Fetch the full definition of one named type."""
        if type_name not in self._types:
            data = await self.session.execute_data(type_query(type_name))
            raw = data.get("__type")
            if not raw:
                raise SchemaResolutionError(type_name, f"Type not found: {type_name}")
            self._types[type_name] = ResolvedType(
                name=raw["name"],
                kind=type_kind(raw).name,
                description=raw.get("description"),
                fields=list(raw.get("fields") or []),
                interfaces=[i["name"] for i in raw.get("interfaces") or []],
            )
        return self._types[type_name]

    async def _get_base_type(self, type_ref: dict[str, Any]) -> ResolvedType:
        base = unwrap_base_type(type_ref)
        return await self.get_type(base["name"])

    async def resolve_operation(self, name: str) -> ResolvedOperation:
        """Resolve the record type behind an operation, looking through page envelopes."""
        operation_type, field_def = await self.describe_operation(name)
        resolved = await self._get_base_type(field_def["type"])
        envelope = None
        if resolved.implements(self.settings.pagination_interface):
            pages = resolved.get_field(self.settings.pages_field)
            if pages is None:
                raise SchemaResolutionError(
                    self.settings.pages_field,
                    f"Paginated type {resolved.name} has no '{self.settings.pages_field}' field",
                )
            envelope = resolved
            resolved = await self._get_base_type(pages["type"])
            logger.debug("Operation %s is paginated through %s", name, envelope.name)
        return ResolvedOperation(
            name=name,
            operation_type=operation_type,
            primary_type=resolved,
            envelope_type=envelope,
            argument_names=[a["name"] for a in field_def.get("args") or []],
        )

    async def resolve_primary_type(self, name: str) -> ResolvedType:
        """The object type an operation's records are made of."""
        return (await self.resolve_operation(name)).primary_type

    async def lazy_field_children(self, operation_name: str, path: Sequence[str] = ()) -> list[FieldInfo]:
        """Fields of the type reached by walking ``path`` from the operation's primary type.

        One type is fetched per path segment. Segments match field names
        case-insensitively.

        Raises:
            SchemaResolutionError: If a segment names no field on the current type
        """
        current = await self.resolve_primary_type(operation_name)
        for segment in path:
            field_def = current.get_field(segment, case_sensitive=False)
            if field_def is None:
                raise SchemaResolutionError(
                    segment, f"Field '{segment}' not found on type {current.name}"
                )
            current = await self._get_base_type(field_def["type"])
        return [describe_field(f) for f in current.fields]

    async def describe_arguments(self, operation_name: str) -> list[ArgumentDescriptor]:
        """Configurable arguments of an operation, unrepresentable ones left out."""
        _, field_def = await self.describe_operation(operation_name)
        return ArgumentTypeMapper().map(field_def.get("args") or [])
