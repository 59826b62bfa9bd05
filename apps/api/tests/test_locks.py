"""Tests for per-apartment operation serialization."""
from __future__ import annotations

import asyncio

import pytest

from apartments.services.locks import ApartmentLocks


@pytest.mark.asyncio
async def test_same_apartment_operations_run_one_at_a_time():
    locks = ApartmentLocks()
    timeline: list[str] = []

    async def operation(name: str) -> None:
        async with locks.hold(1):
            timeline.append(f"{name}:start")
            await asyncio.sleep(0.01)
            timeline.append(f"{name}:end")

    await asyncio.gather(operation("a"), operation("b"))

    assert timeline == ["a:start", "a:end", "b:start", "b:end"]
    assert locks.active() == 0


@pytest.mark.asyncio
async def test_different_apartments_do_not_block_each_other():
    locks = ApartmentLocks()
    first_entered = asyncio.Event()
    release_first = asyncio.Event()

    async def slow() -> None:
        async with locks.hold(1):
            first_entered.set()
            await release_first.wait()

    task = asyncio.create_task(slow())
    await first_entered.wait()

    async with locks.hold(2):
        assert locks.active() == 2

    release_first.set()
    await task
    assert locks.active() == 0


@pytest.mark.asyncio
async def test_lock_is_released_when_operation_fails():
    locks = ApartmentLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold(5):
            raise RuntimeError("boom")

    async with locks.hold(5):
        assert locks.active() == 1
    assert locks.active() == 0
