from __future__ import annotations

import asyncio

import pytest

from storeops_client_sdk.browse.cancellation import CancellationRegistry
from storeops_client_sdk.exceptions import RequestCancelledError


def test_register_cancels_previous_handle() -> None:
    registry = CancellationRegistry()

    first = registry.register("a")
    second = registry.register("b")

    assert first.is_cancelled is True
    assert registry.is_live(first) is False
    assert registry.is_live(second) is True
    assert second.generation == first.generation + 1


def test_cancel_is_idempotent_and_skips_resolved_handles() -> None:
    registry = CancellationRegistry()
    handle = registry.register("a")

    registry.resolve(handle)

    assert registry.live is None
    assert handle.cancel() is False
    assert handle.is_cancelled is False


def test_raise_if_cancelled() -> None:
    handle = CancellationRegistry().register("a")
    handle.raise_if_cancelled()

    handle.cancel()
    with pytest.raises(RequestCancelledError):
        handle.raise_if_cancelled()


@pytest.mark.asyncio
async def test_cancel_aborts_attached_task() -> None:
    registry = CancellationRegistry()
    handle = registry.register("a")
    task = asyncio.get_running_loop().create_task(asyncio.sleep(10))
    handle.attach(task)

    assert registry.cancel_live() is True
    with pytest.raises(asyncio.CancelledError):
        await task
    assert registry.cancel_live() is False


@pytest.mark.asyncio
async def test_attach_after_cancel_cancels_task() -> None:
    handle = CancellationRegistry().register("a")
    handle.cancel()
    task = asyncio.get_running_loop().create_task(asyncio.sleep(10))

    handle.attach(task)

    with pytest.raises(asyncio.CancelledError):
        await task
