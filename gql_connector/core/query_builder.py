"""Query builder for GraphQL operations.

A small document model (Node, Argument, Query) that renders itself to
GraphQL text. It has no knowledge of schemas or HTTP.

Example:
    root = Node("Fetch").set_operation("query")
    root.add_child(
        Node("users").set_alias("recordFetch")
        .add_argument(Argument("limit", [Argument("take", 10), Argument("skip", 0)]))
        .add_child("id")
        .add_child("name")
    )
    root.render()
    # 'query Fetch { recordFetch: users(limit: {take: 10, skip: 0}) { id name } }'
"""

import json
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Union

from .scalars import DATE, DATETIME

ScalarValue = Union[str, int, float, bool, Decimal, datetime, date, None]
ArgumentValue = Union[ScalarValue, "Argument", list["Argument"]]
NodeChild = Union["Node", str]

OPERATION_KEYWORDS = ("query", "mutation")


class Argument:
    """A GraphQL argument, input-object entry or variable declaration.

    With ``is_variable`` the value is written as a bare token, which covers
    both variable references (``status: $status``) and declarations
    (``$status: [Status!]``).
    """

    def __init__(self, name: str, value: ArgumentValue = None, is_variable: bool = False):
        if isinstance(value, (list, tuple)):
            value = list(value)
            if not all(isinstance(item, Argument) for item in value):
                raise TypeError(f"List value of argument '{name}' must contain only Argument items")
        elif not isinstance(value, (Argument, str, int, float, bool, Decimal, datetime, date, type(None))):
            raise TypeError(f"Unsupported value for argument '{name}': {type(value).__name__}")
        if is_variable and not isinstance(value, str):
            raise TypeError(f"Variable argument '{name}' needs a string token")
        self.name = name
        self.value = value
        self.is_variable = is_variable

    def render(self) -> str:
        return f"{self.name}: {self._render_value()}"

    def _render_value(self) -> str:
        value = self.value
        if self.is_variable:
            return value
        # bool before int: bool is an int subclass
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, datetime):
            return json.dumps(DATETIME.serialize(value))
        if isinstance(value, date):
            return json.dumps(DATE.serialize(value))
        if isinstance(value, Argument):
            return "{" + value.render() + "}"
        if isinstance(value, list):
            return "{" + ", ".join(item.render() for item in value) + "}"
        return json.dumps(str(value))

    def __repr__(self) -> str:
        return f"Argument({self.render()!r})"


class Node:
    """A field, operation or inline fragment with its selection set.

    The builder methods mutate the node and return it, so a tree can be
    assembled in one expression. When more than one header form is set,
    the operation keyword wins over the type fragment, which wins over the
    alias.
    """

    def __init__(self, name: str, children: Iterable[NodeChild] = (),
                 arguments: Iterable[Argument] = ()):
        self.name = name
        self.operation: str | None = None
        self.is_type_fragment = False
        self.alias: str | None = None
        self.arguments: list[Argument] = []
        self.children: list[NodeChild] = []
        for argument in arguments:
            self.add_argument(argument)
        for child in children:
            self.add_child(child)

    def add_argument(self, argument: Argument) -> "Node":
        if not isinstance(argument, Argument):
            raise TypeError(f"Expected Argument, got {type(argument).__name__}")
        self.arguments.append(argument)
        return self

    def add_child(self, child: NodeChild) -> "Node":
        if not isinstance(child, (Node, str)):
            raise TypeError(f"Node child must be a Node or a field name, got {type(child).__name__}")
        self.children.append(child)
        return self

    def set_alias(self, alias: str | None) -> "Node":
        self.alias = alias
        return self

    def set_operation(self, operation: str | None) -> "Node":
        if operation is not None and operation not in OPERATION_KEYWORDS:
            raise ValueError(f"Unsupported operation keyword: {operation}")
        self.operation = operation
        return self

    def set_type_fragment(self, is_type_fragment: bool = True) -> "Node":
        self.is_type_fragment = is_type_fragment
        return self

    def find_child(self, name: str) -> "Node | None":
        for child in self.children:
            if isinstance(child, Node) and child.name == name:
                return child
        return None

    def render(self) -> str:
        """Render the tree to GraphQL text. Pure: repeated calls give the same string."""
        if self.operation:
            head = f"{self.operation} {self.name}".rstrip()
        elif self.is_type_fragment:
            head = f"... on {self.name}"
        elif self.alias:
            head = f"{self.alias}: {self.name}"
        else:
            head = self.name

        if self.arguments:
            head += "(" + ", ".join(arg.render() for arg in self.arguments) + ")"

        if self.children:
            body = " ".join(
                child.render() if isinstance(child, Node) else child
                for child in self.children
            )
            head += " { " + body + " }"
        return head

    def __repr__(self) -> str:
        return f"Node({self.name!r}, children={len(self.children)})"


class Query:
    """A complete request: the document plus its variables."""

    def __init__(self, document: Node, variables: dict[str, Any] | None = None):
        if not document.operation:
            raise ValueError("Query document must be an operation node")
        self.document = document
        self.variables: dict[str, Any] = dict(variables or {})

    def declare_variable(self, name: str, graphql_type: str, value: Any) -> Argument:
        """Declare ``$name: type`` on the operation and return a reference to it."""
        self.document.add_argument(Argument(f"${name}", graphql_type, is_variable=True))
        self.variables[name] = value
        return Argument(name, f"${name}", is_variable=True)

    def render(self) -> str:
        return self.document.render()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": self.render()}
        if self.variables:
            payload["variables"] = self.variables
        return payload


FieldSelectionTree = dict[str, "FieldSelectionTree"]


def build_selection_tree(paths: Iterable[str | Sequence[str]]) -> FieldSelectionTree:
    """Fold dotted (``owner.name``) or pre-split field paths into a nested dict.

    A leaf is an empty dict. Insertion order of first appearance is kept.
    """
    tree: FieldSelectionTree = {}
    for path in paths:
        parts = path.split(".") if isinstance(path, str) else list(path)
        current = tree
        for part in parts:
            part = part.strip()
            if not part:
                continue
            current = current.setdefault(part, {})
    return tree


def selection_children(tree: FieldSelectionTree) -> list[NodeChild]:
    """Turn a selection tree into Node children (leaves become plain names)."""
    children: list[NodeChild] = []
    for name, subtree in tree.items():
        if subtree:
            children.append(Node(name, children=selection_children(subtree)))
        else:
            children.append(name)
    return children
