"""Shared fixtures: type-reference builders and a fake GraphQL endpoint."""

import json
import re
from typing import Any, Callable

import httpx
import pytest

from gql_connector.core.executor import RunSession
from gql_connector.core.settings import ConnectorSettings

URL = "https://api.test/graphql"


# =============================================================================
# Introspection payload builders
# =============================================================================


def scalar(name: str) -> dict:
    return {"kind": "SCALAR", "name": name, "ofType": None, "enumValues": None}


def obj(name: str) -> dict:
    return {"kind": "OBJECT", "name": name, "ofType": None, "enumValues": None}


def enum(name: str, values: list[str]) -> dict:
    return {"kind": "ENUM", "name": name, "ofType": None,
            "enumValues": [{"name": v} for v in values]}


def input_object(name: str) -> dict:
    return {"kind": "INPUT_OBJECT", "name": name, "ofType": None, "enumValues": None}


def non_null(of_type: dict) -> dict:
    return {"kind": "NON_NULL", "name": None, "ofType": of_type, "enumValues": None}


def list_of(of_type: dict) -> dict:
    return {"kind": "LIST", "name": None, "ofType": of_type, "enumValues": None}


def field_def(name: str, type_ref: dict, args: list | None = None, description: str | None = None) -> dict:
    return {"name": name, "description": description, "args": args or [], "type": type_ref}


def arg_def(name: str, type_ref: dict, default: str | None = None) -> dict:
    return {"name": name, "description": None, "defaultValue": default, "type": type_ref}


def type_def(name: str, fields: list, interfaces: tuple = (), kind: str = "OBJECT") -> dict:
    return {
        "name": name,
        "kind": kind,
        "description": None,
        "interfaces": [{"name": i} for i in interfaces],
        "fields": fields,
        "enumValues": None,
    }


STATUS = enum("Status", ["OPEN", "CLOSED"])

QUERY_FIELDS = [
    field_def(
        "tickets",
        non_null(obj("TicketPage")),
        args=[
            arg_def("status", list_of(non_null(STATUS))),
            arg_def("limit", input_object("PageLimit")),
            arg_def("modifiedSince", scalar("DateTime")),
            arg_def("team", non_null(scalar("String")), default='"support"'),
        ],
        description="Support tickets",
    ),
    field_def("users", list_of(obj("User")), description="All users"),
]

MUTATION_FIELDS = [
    field_def("createTicket", obj("Ticket"), args=[arg_def("input", non_null(input_object("TicketInput")))]),
]

TYPES = {
    "TicketPage": type_def("TicketPage", [
        field_def("total", non_null(scalar("Int"))),
        field_def("pages", non_null(list_of(non_null(obj("Ticket"))))),
    ], interfaces=("Paginated",)),
    "Ticket": type_def("Ticket", [
        field_def("id", non_null(scalar("ID"))),
        field_def("title", scalar("String"), description="Headline"),
        field_def("status", non_null(STATUS)),
        field_def("owner", obj("User")),
        field_def("tags", list_of(non_null(scalar("String")))),
    ]),
    "User": type_def("User", [
        field_def("name", scalar("String")),
        field_def("manager", obj("User")),
        field_def("address", obj("Address")),
    ]),
    "Address": type_def("Address", [
        field_def("city", scalar("String")),
    ]),
}

TYPE_NAME = re.compile(r'__type\(name: "(\w+)"\)')


class FakeGraphQLServer:
    """In-memory GraphQL endpoint answering introspection from fixed payloads.

    Record queries are answered by ``on_records(payload)``, which tests replace.
    """

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []
        self.query_fields = list(QUERY_FIELDS)
        self.mutation_fields = list(MUTATION_FIELDS)
        self.types = dict(TYPES)
        self.on_records: Callable[[dict], Any] = lambda payload: {"data": {}}

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        self.headers.append(request.headers)
        query = payload["query"]

        if "__schema" in query:
            if "queryType" in query:
                root = {"queryType": {"name": "Query", "fields": self.query_fields}}
            elif self.mutation_fields:
                root = {"mutationType": {"name": "Mutation", "fields": self.mutation_fields}}
            else:
                root = {"mutationType": None}
            return httpx.Response(200, json={"data": {"__schema": root}})

        match = TYPE_NAME.search(query)
        if match:
            return httpx.Response(200, json={"data": {"__type": self.types.get(match.group(1))}})

        body = self.on_records(payload)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def record_requests(self) -> list[dict[str, Any]]:
        return [r for r in self.requests if "__schema" not in r["query"] and "__type" not in r["query"]]


@pytest.fixture
def server():
    return FakeGraphQLServer()


@pytest.fixture
def settings():
    return ConnectorSettings(url=URL, max_page_size=100)


@pytest.fixture
def make_session(server, settings):
    """Factory for sessions wired to the fake server; use with ``async with``."""
    def factory(**kwargs) -> RunSession:
        return RunSession(kwargs.pop("settings", settings), transport=server.transport, **kwargs)
    return factory
