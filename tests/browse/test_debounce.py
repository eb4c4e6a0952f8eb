from __future__ import annotations

import asyncio

import pytest

from storeops_client_sdk.browse.debounce import DebouncedInputFunnel


@pytest.mark.asyncio
async def test_burst_settles_once_with_latest_value() -> None:
    settled: list[str] = []
    funnel = DebouncedInputFunnel(settled.append, delay_seconds=0.02)

    for value in ("m", "mi", "mil", "milk"):
        funnel.push(value)
    assert funnel.pending is True
    assert funnel.raw == "milk"
    assert funnel.settled == ""

    await asyncio.sleep(0.08)

    assert settled == ["milk"]
    assert funnel.settled == "milk"
    assert funnel.pending is False


@pytest.mark.asyncio
async def test_each_push_restarts_quiet_period() -> None:
    settled: list[str] = []
    funnel = DebouncedInputFunnel(settled.append, delay_seconds=0.05)

    funnel.push("a")
    await asyncio.sleep(0.03)
    funnel.push("ab")
    await asyncio.sleep(0.03)
    assert settled == []

    await asyncio.sleep(0.06)
    assert settled == ["ab"]


@pytest.mark.asyncio
async def test_flush_settles_immediately() -> None:
    settled: list[str] = []
    funnel = DebouncedInputFunnel(settled.append, delay_seconds=10)

    funnel.push("bread")
    funnel.flush()
    funnel.flush()

    assert settled == ["bread"]
    assert funnel.pending is False


@pytest.mark.asyncio
async def test_cancel_drops_pending_value() -> None:
    settled: list[str] = []
    funnel = DebouncedInputFunnel(settled.append, delay_seconds=0.01, initial="tea")

    funnel.push("coffee")
    funnel.cancel()
    await asyncio.sleep(0.03)

    assert settled == []
    assert funnel.settled == "tea"
    assert funnel.raw == "coffee"


def test_zero_delay_settles_synchronously() -> None:
    settled: list[str] = []
    funnel = DebouncedInputFunnel(settled.append, delay_seconds=0)

    funnel.push("x")

    assert settled == ["x"]


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError):
        DebouncedInputFunnel(lambda value: None, delay_seconds=-1)
