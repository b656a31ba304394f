"""Interpretation of introspection ``__Type`` payloads.

Introspection describes a type as a chain of wrappers ending in a named
type, e.g. ``NON_NULL -> LIST -> NON_NULL -> SCALAR(Int)`` for ``[Int!]!``.
This module offers two walks over that chain:

    unwrap_base_type   drop the wrappers and return the named type
    describe_type      fold the wrappers into a TypeDescriptor
"""

from typing import Any

from graphql import TypeKind

from .errors import IntrospectionError
from .ir import ArgumentDescriptor, FieldInfo, TypeDescriptor
from .query_builder import Node

WRAPPER_KINDS = (TypeKind.NON_NULL, TypeKind.LIST)

# Wrapper depth covered by type_ref_selection; enough for [[T!]!]!
TYPE_REF_DEPTH = 6


def type_kind(type_ref: dict[str, Any] | None) -> TypeKind:
    """Return the kind of a type reference, failing on malformed payloads."""
    if not isinstance(type_ref, dict) or not type_ref.get("kind"):
        raise IntrospectionError(f"Type reference without 'kind': {type_ref!r}")
    try:
        return TypeKind[type_ref["kind"]]
    except KeyError:
        raise IntrospectionError(f"Unknown type kind: {type_ref['kind']!r}") from None


def _of_type(type_ref: dict[str, Any]) -> dict[str, Any]:
    inner = type_ref.get("ofType")
    if inner is None:
        raise IntrospectionError(f"{type_ref['kind']} wrapper without 'ofType': {type_ref!r}")
    return inner


def unwrap_base_type(type_ref: dict[str, Any]) -> dict[str, Any]:
    """Descend through NON_NULL/LIST wrappers to the named type."""
    current = type_ref
    while type_kind(current) in WRAPPER_KINDS:
        current = _of_type(current)
    return current


def describe_type(type_ref: dict[str, Any]) -> TypeDescriptor:
    """Flatten a type chain into a TypeDescriptor.

    NON_NULL before any LIST marks the value required; NON_NULL after a
    LIST marks the items required. INPUT_OBJECT ends the walk without a
    simple_type, meaning the type cannot be represented as a flat value.
    """
    descriptor = TypeDescriptor()
    current = type_ref
    while True:
        kind = type_kind(current)
        if kind is TypeKind.NON_NULL:
            if descriptor.is_list:
                descriptor.are_items_required = True
            else:
                descriptor.is_required = True
            current = _of_type(current)
        elif kind is TypeKind.LIST:
            descriptor.is_list = True
            current = _of_type(current)
        elif kind is TypeKind.ENUM:
            descriptor.kind = kind.name
            descriptor.simple_type = current.get("name")
            descriptor.is_enum = True
            descriptor.enum_values = [v["name"] for v in current.get("enumValues") or []]
            return descriptor
        elif kind is TypeKind.INPUT_OBJECT:
            descriptor.kind = kind.name
            return descriptor
        else:
            descriptor.kind = kind.name
            descriptor.simple_type = current.get("name")
            return descriptor


def describe_field(field_def: dict[str, Any]) -> FieldInfo:
    return FieldInfo(
        name=field_def["name"],
        description=field_def.get("description"),
        descriptor=describe_type(field_def["type"]),
    )


def describe_argument(arg_def: dict[str, Any]) -> ArgumentDescriptor | None:
    """Describe one declared argument, or None if it has no flat representation."""
    descriptor = describe_type(arg_def["type"])
    if not descriptor.simple_type:
        return None
    return ArgumentDescriptor(
        name=arg_def["name"],
        description=arg_def.get("description"),
        default_value=arg_def.get("defaultValue"),
        descriptor=descriptor,
    )


def type_ref_selection(name: str = "type", depth: int = TYPE_REF_DEPTH) -> Node:
    """Selection set for a type reference, nested ``depth`` wrappers deep."""
    node = Node(name, children=["kind", "name", Node("enumValues", children=["name"])])
    if depth > 0:
        node.add_child(type_ref_selection("ofType", depth - 1))
    return node
