"""Connector facade: the operations an orchestrator calls.

One GraphQLConnector serves one run. It resolves the target operation
once and reuses that shape for planning and for every scope fetched
afterwards.

Example:
    settings = ConnectorSettings(url="https://api.example.com/graphql")
    async with RunSession(settings, auth=TokenProviderAuth(fetch_token)) as session:
        connector = GraphQLConnector(session)
        context = RunContext(operation="tickets", fields=["id", "owner.name"], page_size=100)
        strategy = await connector.plan(context)
        if strategy.kind is not FetchStrategyKind.NO_RECORDS:
            for scope in strategy.scopes or [None]:
                records = await connector.fetch(context, scope)
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from .core.arguments import ArgumentConfiguration
from .core.executor import RunSession
from .core.fetcher import RecordFetcher
from .core.ir import (
    ArgumentDescriptor,
    FetchScope,
    FetchStrategy,
    FetchStrategyKind,
    FieldInfo,
    OperationInfo,
    Record,
    ResolvedOperation,
)
from .core.planner import FetchPlanner
from .core.schema_navigator import SchemaNavigator


@dataclass
class RunContext:
    """What the orchestrator asks for in one run."""
    operation: str
    fields: Sequence[str | Sequence[str]] = ()
    page_size: int | None = None  # caller ceiling; clamped to the provider maximum
    since: datetime | None = None
    configuration: ArgumentConfiguration = field(default_factory=ArgumentConfiguration)


class GraphQLConnector:
    """Discovery, planning and fetching against one GraphQL endpoint."""

    def __init__(self, session: RunSession):
        self.session = session
        self.navigator = SchemaNavigator(session)
        self._resolved: dict[str, ResolvedOperation] = {}
        self._lock = asyncio.Lock()

    async def discover(self) -> list[OperationInfo]:
        return await self.navigator.discover()

    async def describe_fields(self, operation: str, path: Sequence[str] = ()) -> list[FieldInfo]:
        return await self.navigator.lazy_field_children(operation, path)

    async def describe_arguments(self, operation: str) -> list[ArgumentDescriptor]:
        return await self.navigator.describe_arguments(operation)

    async def resolve(self, operation: str) -> ResolvedOperation:
        """Resolve an operation's shape; later calls reuse the first result."""
        async with self._lock:
            if operation not in self._resolved:
                self._resolved[operation] = await self.navigator.resolve_operation(operation)
        return self._resolved[operation]

    async def _fetcher(self, operation: str) -> RecordFetcher:
        return RecordFetcher(self.session, await self.resolve(operation))

    async def plan(self, context: RunContext) -> FetchStrategy:
        fetcher = await self._fetcher(context.operation)
        page_size = self.session.settings.page_size_for(context.page_size)
        planner = FetchPlanner(fetcher.operation, page_size)
        return await planner.plan(lambda: fetcher.count(context.configuration, context.since))

    async def fetch(self, context: RunContext, scope: FetchScope | None = None) -> list[Record]:
        fetcher = await self._fetcher(context.operation)
        return await fetcher.fetch(context.fields, scope, context.configuration, context.since)

    async def fetch_all(self, context: RunContext) -> list[Record]:
        """Plan, then fetch every scope concurrently; records come back in scope order."""
        strategy = await self.plan(context)
        if strategy.kind is FetchStrategyKind.NO_RECORDS:
            return []
        if strategy.kind is FetchStrategyKind.IMMEDIATE:
            return await self.fetch(context)
        batches = await asyncio.gather(*(self.fetch(context, scope) for scope in strategy.scopes))
        return [record for batch in batches for record in batch]
