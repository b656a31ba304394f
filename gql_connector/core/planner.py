"""Fetch planning: one call, no records, or a set of pagination scopes."""

import logging
from collections.abc import Awaitable, Callable

from .ir import FetchScope, FetchStrategy, ResolvedOperation

logger = logging.getLogger(__name__)


def partition(total: int, page_size: int) -> list[FetchScope]:
    """Consecutive, non-overlapping windows covering ``total`` rows.

    partition(230, 100) -> offsets 0, 100, 200; the last window holds 30 rows.
    """
    return [FetchScope(page_size=page_size, offset=offset) for offset in range(0, total, page_size)]


def decide(total: int, page_size: int) -> FetchStrategy:
    """Strategy for a paginated operation once its row count is known."""
    if total <= 0:
        return FetchStrategy.no_records()
    if total < page_size:
        return FetchStrategy.immediate(total)
    return FetchStrategy.scoped(partition(total, page_size), total)


class FetchPlanner:
    """Computes the fetch strategy for one operation, once per run.

    ``probe_total`` is only awaited for paginated operations; it should
    ask the endpoint for a single row and return the reported total.
    """

    def __init__(self, operation: ResolvedOperation, page_size: int):
        self.operation = operation
        self.page_size = page_size

    async def plan(self, probe_total: Callable[[], Awaitable[int]]) -> FetchStrategy:
        if not self.operation.is_paginated:
            logger.info("%s is not paginated, fetching in one call", self.operation.name)
            return FetchStrategy.immediate()

        total = await probe_total()
        strategy = decide(total, self.page_size)
        logger.info(
            "%s reports %d records; strategy %s with %d scope(s) of %d",
            self.operation.name, total, strategy.kind.value, len(strategy.scopes), self.page_size,
        )
        return strategy
