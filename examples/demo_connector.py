#!/usr/bin/env python3
"""Demonstration of the GraphQL connector against a live endpoint.

This script shows how to:
1. Discover the queries an endpoint offers
2. Inspect a query's record fields and arguments
3. Plan and fetch its records page by page

Usage:
    GQL_URL=https://api.example.com/graphql GQL_TOKEN=... python demo_connector.py tickets id title
"""

import asyncio
import os
import sys

from gql_connector import GraphQLConnector, RunContext
from gql_connector.core import BearerAuth, ConnectorSettings, FetchStrategyKind, NoAuth, RunSession


async def demo(operation: str, fields: list[str]):
    settings = ConnectorSettings(url=os.environ["GQL_URL"], max_page_size=50)
    token = os.environ.get("GQL_TOKEN")
    auth = BearerAuth(token) if token else NoAuth()

    async with RunSession(settings, auth=auth) as session:
        connector = GraphQLConnector(session)

        print("=== GraphQL Connector Demo ===\n")
        print("1. Operations:")
        for info in await connector.discover():
            kind = "query" if info.readable else "mutation"
            print(f"   {info.name} ({kind}): {info.description or ''}")

        print(f"\n2. Fields of {operation}:")
        for field in await connector.describe_fields(operation):
            print(f"   {field.name}: {field.descriptor.full_type}")

        print(f"\n   Arguments of {operation}:")
        for argument in await connector.describe_arguments(operation):
            required = " (required)" if argument.is_required else ""
            print(f"   {argument.name}: {argument.full_type}{required}")

        context = RunContext(operation=operation, fields=fields, page_size=25)
        strategy = await connector.plan(context)
        print(f"\n3. Strategy: {strategy.kind.value}, total={strategy.total}, scopes={len(strategy.scopes)}")

        if strategy.kind is FetchStrategyKind.NO_RECORDS:
            return
        for scope in strategy.scopes or [None]:
            for record in await connector.fetch(context, scope):
                print(f"   {record.values}" + (f"  errors: {record.errors}" if record.errors else ""))


def main():
    if len(sys.argv) < 3 or "GQL_URL" not in os.environ:
        print(__doc__)
        return
    asyncio.run(demo(sys.argv[1], sys.argv[2:]))


if __name__ == "__main__":
    main()
