from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field

import pytest

from storeops_client_sdk.browse.query_key import Query
from storeops_client_sdk.models_listing import PageResult, Pagination


def build_page(query: Query, *, total: int, limit: int) -> PageResult:
    start = (query.page - 1) * limit
    stop = min(start + limit, total)
    items = tuple(f"{query.scope_id}:{query.search or '*'}:{index}" for index in range(start, max(start, stop)))
    return PageResult(
        items=items,
        pagination=Pagination(page=query.page, limit=limit, total=total, pages=math.ceil(total / limit)),
        stats={"total_products": total, "search": query.search},
    )


@dataclass
class InstantFetcher:
    """List API stand-in that answers immediately from a fixed-size dataset."""

    total: int = 23
    limit: int = 10
    calls: list[Query] = field(default_factory=list)

    async def __call__(self, query: Query) -> PageResult:
        self.calls.append(query)
        return build_page(query, total=self.total, limit=self.limit)


@dataclass
class GatedFetcher:
    """List API stand-in whose responses are released by the test.

    With ``honor_cancel=False`` it behaves like a transport that ignores
    cancellation and still delivers its response.
    """

    total: int = 23
    limit: int = 10
    honor_cancel: bool = True
    calls: list[Query] = field(default_factory=list)
    gates: list[asyncio.Future] = field(default_factory=list)

    async def __call__(self, query: Query) -> PageResult:
        self.calls.append(query)
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        if self.honor_cancel:
            outcome = await gate
        else:
            try:
                outcome = await asyncio.shield(gate)
            except asyncio.CancelledError:
                outcome = await gate
        if isinstance(outcome, Exception):
            raise outcome
        return outcome if isinstance(outcome, PageResult) else build_page(query, total=self.total, limit=self.limit)

    def release(self, index: int, outcome: object = None) -> None:
        gate = self.gates[index]
        if not gate.done():
            gate.set_result(outcome)


@pytest.fixture
def instant_fetcher() -> InstantFetcher:
    return InstantFetcher()


@pytest.fixture
def gated_fetcher() -> GatedFetcher:
    return GatedFetcher()
