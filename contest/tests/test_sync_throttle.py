"""
Throttle gate for the public-path Instagram sync
"""
from datetime import datetime, timedelta

import pytest

from contest.services.sync_throttle import DEFAULT_SYNC_INTERVAL_MS, should_sync, sync_guard

NOW = datetime(2026, 3, 1, 12, 0, 0)


def test_never_synced_allows_sync():
    assert should_sync(NOW, None, DEFAULT_SYNC_INTERVAL_MS) is True


@pytest.mark.parametrize("elapsed_ms", [0, 1, 15000, 29999, 30000])
def test_within_interval_blocks_sync(elapsed_ms):
    last = NOW - timedelta(milliseconds=elapsed_ms)
    assert should_sync(NOW, last, 30000) is False


@pytest.mark.parametrize("elapsed_ms", [30001, 60000, 3600 * 1000])
def test_past_interval_allows_sync(elapsed_ms):
    last = NOW - timedelta(milliseconds=elapsed_ms)
    assert should_sync(NOW, last, 30000) is True


def test_last_sync_in_the_future_blocks_sync():
    # Another worker persisted a later timestamp than our request time
    assert should_sync(NOW, NOW + timedelta(seconds=5), 30000) is False


def test_default_interval_is_thirty_seconds():
    assert DEFAULT_SYNC_INTERVAL_MS == 30000
    assert should_sync(NOW, NOW - timedelta(seconds=31)) is True
    assert should_sync(NOW, NOW - timedelta(seconds=29)) is False


@pytest.mark.asyncio
async def test_sync_guard_is_shared_within_a_loop():
    assert sync_guard() is sync_guard()
