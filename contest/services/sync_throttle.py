"""
Sync Throttle

Decides whether a new Instagram fetch is allowed, based on the timestamp
of the last completed sync stored in contest_settings.

The gate is best-effort across processes. Within one process the
throttled sync runs under `sync_guard`, so concurrent requests re-check
the gate after the first one has persisted its timestamp.
"""
import asyncio
import weakref
from datetime import datetime, timedelta
from typing import Optional

DEFAULT_SYNC_INTERVAL_MS = 30000

# One lock per running event loop: an asyncio.Lock cannot be shared across loops,
# and pytest-asyncio gives each test its own loop
_guards: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def sync_guard() -> asyncio.Lock:
    """Lock serializing the throttled sync within this process"""
    loop = asyncio.get_running_loop()
    guard = _guards.get(loop)
    if guard is None:
        guard = _guards[loop] = asyncio.Lock()
    return guard


def should_sync(now: datetime, last_sync_at: Optional[datetime], interval_ms: int = DEFAULT_SYNC_INTERVAL_MS) -> bool:
    """
    True when more than `interval_ms` has elapsed since `last_sync_at`.

    A missing timestamp (never synced) always allows a sync.
    """
    if last_sync_at is None:
        return True
    return now - last_sync_at > timedelta(milliseconds=interval_ms)
