"""Tests for introspection-driven schema discovery."""

import pytest
from graphql import parse

from gql_connector.core.errors import IntrospectionError, SchemaResolutionError
from gql_connector.core.schema_navigator import SchemaNavigator, operations_query, type_query


class TestIntrospectionQueries:
    """Tests for the generated introspection documents."""

    def test_operations_query_is_valid(self):
        rendered = operations_query("query").render()
        parse(rendered)
        assert "__schema { queryType { name fields {" in rendered

    def test_mutation_operations_query(self):
        assert "mutationType" in operations_query("mutation").render()

    def test_type_query_is_valid(self):
        rendered = type_query("Ticket").render()
        parse(rendered)
        assert '__type(name: "Ticket")' in rendered
        assert "interfaces { name }" in rendered


class TestSchemaNavigator:
    """Tests for SchemaNavigator against a fake endpoint."""

    @pytest.mark.asyncio
    async def test_list_operations(self, make_session):
        async with make_session() as session:
            navigator = SchemaNavigator(session)
            assert await navigator.list_operations("query") == [
                ("tickets", "Support tickets"),
                ("users", "All users"),
            ]
            assert await navigator.list_operations("mutation") == [("createTicket", None)]

    @pytest.mark.asyncio
    async def test_unsupported_operation_type(self, make_session):
        async with make_session() as session:
            with pytest.raises(ValueError):
                await SchemaNavigator(session).list_operations("subscription")

    @pytest.mark.asyncio
    async def test_discover_flags(self, make_session):
        async with make_session() as session:
            operations = await SchemaNavigator(session).discover()
        by_name = {op.name: op for op in operations}
        assert by_name["tickets"].readable and not by_name["tickets"].writable
        assert by_name["createTicket"].writable and not by_name["createTicket"].readable

    @pytest.mark.asyncio
    async def test_schema_without_mutations(self, server, make_session):
        server.mutation_fields = []
        async with make_session() as session:
            assert await SchemaNavigator(session).list_operations("mutation") == []

    @pytest.mark.asyncio
    async def test_operation_list_fetched_once(self, server, make_session):
        async with make_session() as session:
            navigator = SchemaNavigator(session)
            await navigator.describe_operation("tickets")
            await navigator.describe_operation("users")
        schema_requests = [r for r in server.requests if "__schema" in r["query"]]
        assert len(schema_requests) == 1

    @pytest.mark.asyncio
    async def test_describe_operation_exact_match(self, make_session):
        async with make_session() as session:
            navigator = SchemaNavigator(session)
            operation_type, field_def = await navigator.describe_operation("createTicket")
            assert operation_type == "mutation"
            assert field_def["name"] == "createTicket"
            with pytest.raises(SchemaResolutionError) as exc_info:
                await navigator.describe_operation("Tickets")
        assert exc_info.value.name == "Tickets"

    @pytest.mark.asyncio
    async def test_resolve_paginated_operation(self, make_session):
        async with make_session() as session:
            operation = await SchemaNavigator(session).resolve_operation("tickets")
        assert operation.is_paginated
        assert operation.envelope_type.name == "TicketPage"
        assert operation.primary_type.name == "Ticket"
        assert operation.operation_type == "query"
        assert operation.argument_names == ["status", "limit", "modifiedSince", "team"]

    @pytest.mark.asyncio
    async def test_resolve_plain_list_operation(self, make_session):
        async with make_session() as session:
            operation = await SchemaNavigator(session).resolve_operation("users")
        assert not operation.is_paginated
        assert operation.primary_type.name == "User"

    @pytest.mark.asyncio
    async def test_paginated_type_without_pages_field(self, server, make_session):
        server.types["TicketPage"] = dict(server.types["TicketPage"], fields=[])
        async with make_session() as session:
            with pytest.raises(SchemaResolutionError):
                await SchemaNavigator(session).resolve_operation("tickets")

    @pytest.mark.asyncio
    async def test_unknown_type(self, server, make_session):
        del server.types["User"]
        async with make_session() as session:
            with pytest.raises(SchemaResolutionError) as exc_info:
                await SchemaNavigator(session).resolve_primary_type("users")
        assert exc_info.value.name == "User"

    @pytest.mark.asyncio
    async def test_malformed_type_reference(self, server, make_session):
        server.query_fields = [{"name": "broken", "args": [], "type": {"name": "X"}}]
        async with make_session() as session:
            with pytest.raises(IntrospectionError):
                await SchemaNavigator(session).resolve_operation("broken")

    @pytest.mark.asyncio
    async def test_lazy_field_children_root(self, make_session):
        async with make_session() as session:
            fields = await SchemaNavigator(session).lazy_field_children("tickets")
        assert [f.name for f in fields] == ["id", "title", "status", "owner", "tags"]
        tags = fields[-1].descriptor
        assert tags.full_type == "[String!]"
        assert fields[3].descriptor.is_composite

    @pytest.mark.asyncio
    async def test_lazy_field_children_walks_path_case_insensitively(self, server, make_session):
        async with make_session() as session:
            fields = await SchemaNavigator(session).lazy_field_children("tickets", ["Owner", "address"])
        assert [f.name for f in fields] == ["city"]

    @pytest.mark.asyncio
    async def test_lazy_field_children_follows_cycles_only_as_far_as_asked(self, server, make_session):
        async with make_session() as session:
            fields = await SchemaNavigator(session).lazy_field_children(
                "users", ["manager", "manager", "manager"]
            )
        assert [f.name for f in fields] == ["name", "manager", "address"]
        type_requests = [r for r in server.requests if "__type" in r["query"]]
        # User is fetched once and served from the cache afterwards
        assert len(type_requests) == 1

    @pytest.mark.asyncio
    async def test_lazy_field_children_unknown_segment(self, make_session):
        async with make_session() as session:
            with pytest.raises(SchemaResolutionError) as exc_info:
                await SchemaNavigator(session).lazy_field_children("tickets", ["owner", "phone"])
        assert exc_info.value.name == "phone"

    @pytest.mark.asyncio
    async def test_describe_arguments_skips_input_objects(self, make_session):
        async with make_session() as session:
            arguments = await SchemaNavigator(session).describe_arguments("tickets")
        assert [a.name for a in arguments] == ["status", "modifiedSince", "team"]
        status = arguments[0]
        assert status.full_type == "[Status!]"
        assert status.descriptor.enum_values == ["OPEN", "CLOSED"]
        assert arguments[2].default_value == '"support"'
