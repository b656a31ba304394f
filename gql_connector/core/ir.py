"""Intermediate Representation (IR) for a remote GraphQL schema and its records.

This module defines the dataclasses the connector passes between the
schema navigator, the fetch planner and the record fetcher. None of
them know about HTTP.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class TypeDescriptor:
    """Flattened shape of a GraphQL type chain.

    ``[String!]!`` becomes simple_type="String", is_list=True,
    are_items_required=True, is_required=True.
    """
    simple_type: str | None = None
    kind: str | None = None  # kind of the innermost named type
    is_list: bool = False
    is_required: bool = False
    are_items_required: bool = False
    is_enum: bool = False
    enum_values: list[str] | None = None

    @property
    def full_type(self) -> str:
        """Canonical GraphQL signature, e.g. ``[Int!]!``."""
        text = self.simple_type or ""
        if self.is_list:
            text = f"[{text}{'!' if self.are_items_required else ''}]"
        if self.is_required:
            text = f"{text}!"
        return text

    @property
    def is_composite(self) -> bool:
        """True if the type has its own fields to drill into."""
        return self.kind in ("OBJECT", "INTERFACE", "UNION")

    def to_dict(self) -> dict[str, Any]:
        result = {
            "simpleType": self.simple_type,
            "isList": self.is_list,
            "isRequired": self.is_required,
            "areItemsRequired": self.are_items_required,
            "isEnum": self.is_enum,
            "fullType": self.full_type,
        }
        if self.is_enum:
            result["enumValues"] = list(self.enum_values or [])
        return result


@dataclass
class FieldInfo:
    """A field on an object type, as listed for field discovery."""
    name: str
    descriptor: TypeDescriptor
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, **self.descriptor.to_dict()}


@dataclass
class ArgumentDescriptor:
    """A user-configurable argument of a query."""
    name: str
    descriptor: TypeDescriptor
    description: str | None = None
    default_value: str | None = None  # GraphQL literal, as introspection reports it

    @property
    def full_type(self) -> str:
        return self.descriptor.full_type

    @property
    def is_required(self) -> bool:
        return self.descriptor.is_required

    @property
    def is_list(self) -> bool:
        return self.descriptor.is_list

    def enum_options(self) -> list[dict[str, str]]:
        """Enum values shaped as ``{value, label}`` pairs for pick lists."""
        return [{"value": v, "label": v} for v in self.descriptor.enum_values or []]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "defaultValue": self.default_value,
            **self.descriptor.to_dict(),
        }


@dataclass
class OperationInfo:
    """A query or mutation offered by the endpoint."""
    name: str
    description: str | None = None
    readable: bool = False
    writable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "readable": self.readable,
            "writable": self.writable,
        }


@dataclass
class ResolvedType:
    """A fully introspected object type (raw field definitions kept as returned)."""
    name: str
    kind: str
    fields: list[dict[str, Any]] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    description: str | None = None

    def implements(self, interface: str) -> bool:
        return interface in self.interfaces

    def get_field(self, name: str, case_sensitive: bool = True) -> dict[str, Any] | None:
        """Look up a raw field definition by name."""
        for candidate in self.fields:
            field_name = candidate.get("name", "")
            if field_name == name or (not case_sensitive and field_name.lower() == name.lower()):
                return candidate
        return None


@dataclass
class ResolvedOperation:
    """Everything the planner and the fetcher need to know about one operation.

    ``primary_type`` is the record type. When the operation is paginated,
    ``envelope_type`` is the page wrapper that carries it.
    """
    name: str
    operation_type: str  # 'query' or 'mutation'
    primary_type: ResolvedType
    envelope_type: ResolvedType | None = None
    argument_names: list[str] = field(default_factory=list)

    @property
    def is_paginated(self) -> bool:
        return self.envelope_type is not None

    def accepts_argument(self, name: str) -> bool:
        return name in self.argument_names


@dataclass(frozen=True)
class FetchScope:
    """One window of paginated work. A plain value; equal scopes are interchangeable."""
    page_size: int
    offset: int = 0

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.offset < 0:
            raise ValueError(f"offset must not be negative, got {self.offset}")

    def to_dict(self) -> dict[str, int]:
        return {"pageSize": self.page_size, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FetchScope":
        return cls(page_size=int(data["pageSize"]), offset=int(data.get("offset", 0)))


class FetchStrategyKind(Enum):
    """How an operation's records will be fetched."""
    NO_RECORDS = "no_records"
    IMMEDIATE = "immediate"  # one call, no scope
    SCOPED = "scoped"        # one call per FetchScope


@dataclass
class FetchStrategy:
    """Result of fetch planning."""
    kind: FetchStrategyKind
    scopes: list[FetchScope] = field(default_factory=list)
    total: int | None = None

    @classmethod
    def no_records(cls) -> "FetchStrategy":
        return cls(kind=FetchStrategyKind.NO_RECORDS, total=0)

    @classmethod
    def immediate(cls, total: int | None = None) -> "FetchStrategy":
        return cls(kind=FetchStrategyKind.IMMEDIATE, total=total)

    @classmethod
    def scoped(cls, scopes: list[FetchScope], total: int) -> "FetchStrategy":
        return cls(kind=FetchStrategyKind.SCOPED, scopes=scopes, total=total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "total": self.total,
            "scopes": [s.to_dict() for s in self.scopes],
        }


@dataclass
class Record:
    """One fetched row plus any errors the server reported for it."""
    values: dict[str, Any]
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"values": self.values, "errors": list(self.errors)}
