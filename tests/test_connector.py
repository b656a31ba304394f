"""End-to-end tests for the connector facade."""

import asyncio
import re

import pytest

from gql_connector import GraphQLConnector, RunContext
from gql_connector.core.arguments import ArgumentConfiguration, ConfiguredArgument
from gql_connector.core.errors import SchemaResolutionError
from gql_connector.core.ir import FetchScope, FetchStrategyKind

LIMIT = re.compile(r"take: (\d+), skip: (\d+)")


def paged_tickets(total: int):
    """Record handler serving ``total`` tickets through the page envelope."""
    def on_records(payload):
        take, skip = (int(g) for g in LIMIT.search(payload["query"]).groups())
        rows = [{"id": str(i), "owner": {"name": f"user{i}"}} for i in range(skip, min(skip + take, total))]
        if "pages" not in payload["query"]:
            return {"data": {"recordFetch": {"total": total}}}
        return {"data": {"recordFetch": {"total": total, "pages": rows}}}
    return on_records


class TestGraphQLConnector:
    """Tests for GraphQLConnector."""

    @pytest.mark.asyncio
    async def test_discover(self, make_session):
        async with make_session() as session:
            operations = await GraphQLConnector(session).discover()
        assert [op.to_dict() for op in operations][0] == {
            "name": "tickets", "description": "Support tickets", "readable": True, "writable": False,
        }

    @pytest.mark.asyncio
    async def test_describe_fields_and_arguments(self, make_session):
        async with make_session() as session:
            connector = GraphQLConnector(session)
            fields = await connector.describe_fields("tickets", ["owner"])
            arguments = await connector.describe_arguments("tickets")
        assert [f.name for f in fields] == ["name", "manager", "address"]
        assert [a.name for a in arguments] == ["status", "modifiedSince", "team"]

    @pytest.mark.asyncio
    async def test_plan_scoped(self, server, make_session):
        server.on_records = paged_tickets(230)
        async with make_session() as session:
            strategy = await GraphQLConnector(session).plan(RunContext(operation="tickets", page_size=100))
        assert strategy.kind is FetchStrategyKind.SCOPED
        assert [s.to_dict() for s in strategy.scopes] == [
            {"pageSize": 100, "offset": 0},
            {"pageSize": 100, "offset": 100},
            {"pageSize": 100, "offset": 200},
        ]

    @pytest.mark.asyncio
    async def test_plan_caps_page_size(self, server, make_session):
        server.on_records = paged_tickets(450)
        async with make_session() as session:
            strategy = await GraphQLConnector(session).plan(RunContext(operation="tickets", page_size=5000))
        assert {s.page_size for s in strategy.scopes} == {100}
        assert len(strategy.scopes) == 5

    @pytest.mark.asyncio
    async def test_plan_not_paginated(self, server, make_session):
        async with make_session() as session:
            strategy = await GraphQLConnector(session).plan(RunContext(operation="users"))
        assert strategy.kind is FetchStrategyKind.IMMEDIATE
        assert server.record_requests() == []

    @pytest.mark.asyncio
    async def test_plan_unknown_operation(self, make_session):
        async with make_session() as session:
            with pytest.raises(SchemaResolutionError):
                await GraphQLConnector(session).plan(RunContext(operation="nothing"))

    @pytest.mark.asyncio
    async def test_fetch_scope(self, server, make_session):
        server.on_records = paged_tickets(230)
        context = RunContext(operation="tickets", fields=["id", "owner.name"], page_size=100)
        async with make_session() as session:
            records = await GraphQLConnector(session).fetch(context, FetchScope(page_size=100, offset=200))
        assert len(records) == 30
        assert records[0].values == {"id": "200", "owner.name": "user200"}

    @pytest.mark.asyncio
    async def test_fetch_all_runs_scopes_and_resolves_once(self, server, make_session):
        server.on_records = paged_tickets(230)
        context = RunContext(
            operation="tickets",
            fields=["id"],
            page_size=100,
            configuration=ArgumentConfiguration(arguments=[
                ConfiguredArgument(name="team", full_type="String!", value="ops"),
            ]),
        )
        async with make_session() as session:
            connector = GraphQLConnector(session)
            records = await connector.fetch_all(context)

        assert [r.values["id"] for r in records] == [str(i) for i in range(230)]
        record_requests = server.record_requests()
        # one probe plus three scopes
        assert len(record_requests) == 4
        assert all(r["variables"] == {"team": "ops"} for r in record_requests)
        schema_requests = [r for r in server.requests if "__schema" in r["query"]]
        assert len(schema_requests) == 1

    @pytest.mark.asyncio
    async def test_fetch_all_no_records(self, server, make_session):
        server.on_records = paged_tickets(0)
        async with make_session() as session:
            records = await GraphQLConnector(session).fetch_all(RunContext(operation="tickets", fields=["id"]))
        assert records == []
        assert len(server.record_requests()) == 1

    @pytest.mark.asyncio
    async def test_concurrent_resolution_shares_result(self, server, make_session):
        async with make_session() as session:
            connector = GraphQLConnector(session)
            first, second = await asyncio.gather(connector.resolve("users"), connector.resolve("users"))
        assert first is second

    @pytest.mark.asyncio
    async def test_saved_arguments_dropped_for_operation_without_arguments(self, server, make_session):
        server.on_records = lambda payload: {"data": {"recordFetch": [{"name": "Ada"}]}}
        context = RunContext(
            operation="users",
            fields=["name"],
            configuration=ArgumentConfiguration(arguments=[
                ConfiguredArgument(name="region", full_type="String", value="EU"),
            ]),
        )
        async with make_session() as session:
            records = await GraphQLConnector(session).fetch(context)

        assert [r.values for r in records] == [{"name": "Ada"}]
        sent = server.record_requests()[0]
        assert sent["query"] == "query RecordFetch { recordFetch: users { name } }"
        assert "variables" not in sent
