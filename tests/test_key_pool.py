# tests/test_key_pool.py

import asyncio

import httpx
import pytest

from core.errors import MissingCapabilityError, NoCredentialsError, OriginNotFoundError
from core.services.key_pool import KeyPoolManager

pytestmark = pytest.mark.asyncio


async def test_get_or_init_discovers_once(fake_source_factory):
    source = fake_source_factory([["K3", "K2", "K1"]])
    pool = KeyPoolManager(source)

    assert await pool.get_or_init() == ["K3", "K2", "K1"]
    assert await pool.get_or_init() == ["K3", "K2", "K1"]
    assert len(source.discover_calls) == 1


async def test_get_or_init_dedupes_discovery_results(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([["A", "B", "A"]]))
    assert await pool.get_or_init() == ["A", "B"]


async def test_empty_discovery_raises(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([[]]))
    with pytest.raises(NoCredentialsError):
        await pool.get_or_init()


async def test_source_without_capabilities_is_rejected():
    with pytest.raises(MissingCapabilityError):
        KeyPoolManager(object())


async def test_mark_success_moves_key_to_front(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([["A", "B", "C"]]))
    await pool.get_or_init()

    pool.mark_success("C")
    assert pool.ordered() == ["C", "A", "B"]
    pool.mark_success("B")
    assert pool.ordered() == ["B", "A", "C"]


async def test_ordered_ignores_marker_not_in_pool(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([["A", "B"]]))
    await pool.get_or_init()
    pool.mark_success("Z")
    assert pool.ordered() == ["A", "B"]
    assert pool.last_successful is None


async def test_refresh_excludes_key_and_clears_marker(fake_source_factory):
    source = fake_source_factory([["A", "B"], ["X", "A", "B"]])
    pool = KeyPoolManager(source)
    await pool.get_or_init()
    pool.mark_success("A")

    fresh = await pool.refresh(excluding="A")

    assert "A" not in fresh
    assert fresh == ["X", "B"]
    assert pool.pool == ["X", "B"]
    assert pool.last_successful is None
    assert source.discover_calls[-1] == ["A"]


async def test_refresh_drops_excluded_key_even_if_source_returns_it(fake_source_factory):
    class StubbornSource:
        async def discover_credentials(self, excluding=()):
            return ["A", "B"]

        async def discover_service_origin(self):
            return "https://alkalimakersuite.google.com"

    pool = KeyPoolManager(StubbornSource())
    await pool.get_or_init()
    assert await pool.refresh(excluding="A") == ["B"]


async def test_empty_pool_after_refresh_is_rediscovered(fake_source_factory):
    source = fake_source_factory([["A"], [], ["N"]])
    pool = KeyPoolManager(source)
    await pool.get_or_init()
    assert await pool.refresh(excluding="A") == []
    assert await pool.get_or_init() == ["N"]


async def test_service_origin_is_cached(fake_source_factory):
    source = fake_source_factory([["A"]])
    pool = KeyPoolManager(source)

    results = await asyncio.gather(pool.service_origin(), pool.service_origin())

    assert results[0] == results[1] == "https://alkalimakersuite-pa.clients6.google.com"
    assert source.origin_calls == 1


async def test_service_origin_not_found_propagates(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([["A"]], origin=None))
    with pytest.raises(OriginNotFoundError):
        await pool.service_origin()


async def test_failed_refresh_keeps_pool_and_clears_marker(fake_source_factory):
    source = fake_source_factory([["A", "B"], httpx.ConnectError("page unreachable")])
    pool = KeyPoolManager(source)
    await pool.get_or_init()
    pool.mark_success("A")

    with pytest.raises(httpx.ConnectError):
        await pool.refresh(excluding="A")

    assert pool.pool == ["A", "B"]
    assert pool.last_successful is None


async def test_mark_success_requires_pool_membership(fake_source_factory):
    pool = KeyPoolManager(fake_source_factory([["A"], []]))
    await pool.get_or_init()
    await pool.refresh(excluding="A")

    pool.mark_success("A")
    assert pool.last_successful is None
