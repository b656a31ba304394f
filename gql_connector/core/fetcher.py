"""Record fetching.

Builds the record query for one operation, runs it, and turns the
response into Record objects. Errors that the server reports with a row
index in their ``path`` are attached to that row; they never fail the
call as long as the response carries data.

The query has this shape (paginated case):

    query RecordFetch($status: [Status!]) {
      recordFetch: tickets(limit: {take: 100, skip: 200}, modifiedSince: "...", status: $status) {
        total
        pages { id owner { name } }
      }
    }
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from .arguments import ArgumentConfiguration
from .errors import GraphQLCallError
from .executor import RunSession, aggregate_error_message, format_error
from .ir import FetchScope, Record, ResolvedOperation
from .query_builder import Argument, Node, Query, build_selection_tree, selection_children
from .scalars import FILTER_DATETIME

logger = logging.getLogger(__name__)

PAGES_SLOT = "pages"


def row_index(path: Sequence[Any] | None) -> int | None:
    """First integer in a GraphQL error path, i.e. the row within the fetched list."""
    for segment in path or ():
        if isinstance(segment, int) and not isinstance(segment, bool):
            return segment
    return None


def correlate_errors(errors: Iterable[dict[str, Any]]) -> tuple[dict[int, list[str]], list[str]]:
    """Group error strings by row index.

    Returns:
        (errors by row, errors that carry no row index)
    """
    by_row: dict[int, list[str]] = {}
    unplaced: list[str] = []
    for error in errors:
        index = row_index(error.get("path"))
        if index is None:
            unplaced.append(format_error(error))
        else:
            by_row.setdefault(index, []).append(format_error(error))
    return by_row, unplaced


def flatten_row(row: dict[str, Any] | None, prefix: str = "") -> dict[str, Any]:
    """Nested objects become dotted keys: ``{"owner": {"name": x}}`` -> ``{"owner.name": x}``."""
    result: dict[str, Any] = {}
    for key, value in (row or {}).items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            result.update(flatten_row(value, f"{name}."))
        else:
            result[name] = value
    return result


class RecordFetcher:
    """Builds and runs record queries for one resolved operation.

    Instances hold no per-call state, so scopes may be fetched concurrently.
    """

    def __init__(self, session: RunSession, operation: ResolvedOperation):
        self.session = session
        self.settings = session.settings
        self.operation = operation

    def _operation_node(
        self,
        query: Query,
        configuration: ArgumentConfiguration | None,
        since: datetime | None,
        scope: FetchScope | None = None,
    ) -> Node:
        node = Node(self.operation.name).set_alias(self.settings.record_alias)
        if scope is not None:
            node.add_argument(self._limit(scope))
        if since is not None and self.operation.accepts_argument(self.settings.filter_argument):
            node.add_argument(Argument(self.settings.filter_argument, FILTER_DATETIME.serialize(since)))
        for name, full_type, value in (configuration.variables() if configuration else []):
            if not self.operation.accepts_argument(name):
                logger.warning("Skipping configured argument %s: not accepted by %s", name, self.operation.name)
                continue
            node.add_argument(query.declare_variable(name, full_type, value))
        query.document.add_child(node)
        return node

    def _limit(self, scope: FetchScope) -> Argument:
        return Argument(self.settings.limit_argument, [
            Argument("take", scope.page_size),
            Argument("skip", scope.offset),
        ])

    def _new_query(self) -> Query:
        return Query(Node("RecordFetch").set_operation(self.operation.operation_type))

    def build_query(
        self,
        selection_paths: Iterable[str | Sequence[str]],
        scope: FetchScope | None = None,
        configuration: ArgumentConfiguration | None = None,
        since: datetime | None = None,
    ) -> Query:
        """Assemble the record query.

        A paginated operation always goes through the page envelope; without
        a scope it reads the first window of the provider's maximum size.
        """
        selection = selection_children(build_selection_tree(selection_paths))
        if not selection:
            raise ValueError(f"No fields selected for {self.operation.name}")

        if scope is None and self.operation.is_paginated:
            scope = FetchScope(page_size=self.settings.max_page_size)
        query = self._new_query()
        node = self._operation_node(query, configuration, since, scope)

        if scope is None:
            for child in selection:
                node.add_child(child)
            return query

        for metadata in self.settings.page_metadata_fields:
            node.add_child(metadata)
        pages = Node(self.settings.pages_field, children=selection)
        if self.settings.pages_field != PAGES_SLOT:
            pages.set_alias(PAGES_SLOT)
        node.add_child(pages)
        return query

    def build_count_query(
        self,
        configuration: ArgumentConfiguration | None = None,
        since: datetime | None = None,
    ) -> Query:
        """One-row probe that only asks for the total."""
        query = self._new_query()
        node = self._operation_node(query, configuration, since, FetchScope(page_size=1))
        node.add_child(self.settings.total_field)
        return query

    async def count(
        self,
        configuration: ArgumentConfiguration | None = None,
        since: datetime | None = None,
    ) -> int:
        """Total number of records the operation would return.

        Raises:
            GraphQLCallError: If the response reports no total
        """
        response = await self.session.execute(self.build_count_query(configuration, since))
        envelope = (response.data or {}).get(self.settings.record_alias) or {}
        total = envelope.get(self.settings.total_field)
        if not isinstance(total, int):
            messages = aggregate_error_message(response.errors) or "no total reported"
            raise GraphQLCallError(f"Could not count {self.operation.name}: {messages}", response.errors)
        return total

    def _rows(self, data: dict[str, Any] | None, paginated: bool) -> list[Any]:
        payload = (data or {}).get(self.settings.record_alias)
        if paginated:
            payload = (payload or {}).get(PAGES_SLOT)
        if payload is None:
            return []
        if isinstance(payload, list):
            return payload
        return [payload]

    async def fetch(
        self,
        selection_paths: Iterable[str | Sequence[str]],
        scope: FetchScope | None = None,
        configuration: ArgumentConfiguration | None = None,
        since: datetime | None = None,
    ) -> list[Record]:
        """Fetch one batch of records.

        Raises:
            TransportError: If the HTTP call fails
            GraphQLCallError: If the response has errors and no data
        """
        paginated = scope is not None or self.operation.is_paginated
        query = self.build_query(selection_paths, scope, configuration, since)
        response = await self.session.execute(query)

        by_row, unplaced = correlate_errors(response.errors)
        if unplaced:
            logger.warning("%d error(s) from %s could not be tied to a record: %s",
                           len(unplaced), self.operation.name, "; ".join(unplaced))

        rows = self._rows(response.data, paginated)
        stray = [message for index, messages in by_row.items() if index >= len(rows) for message in messages]
        if stray:
            logger.warning("%d error(s) from %s point past the %d returned record(s): %s",
                           len(stray), self.operation.name, len(rows), "; ".join(stray))

        records = [
            Record(values=flatten_row(row), errors=by_row.get(index, []))
            for index, row in enumerate(rows)
        ]
        logger.debug("Fetched %d record(s) from %s (scope %s)", len(records), self.operation.name, scope)
        return records
