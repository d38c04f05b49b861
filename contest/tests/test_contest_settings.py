"""
Contest settings persisted as key/value rows
"""
from datetime import datetime

import pytest

from contest.orm.contest_setting import SettingKey
from contest.services import contest_settings
from contest.tests.factories import BASE_TIME


@pytest.mark.asyncio
async def test_defaults_when_nothing_stored(db_session):
    assert await contest_settings.is_contest_closed(db_session) is False
    assert await contest_settings.show_public_scores(db_session) is False
    assert await contest_settings.get_closed_at(db_session) is None
    assert await contest_settings.get_last_sync_at(db_session) is None


@pytest.mark.asyncio
async def test_close_and_reopen(db_session):
    closed_at = await contest_settings.set_contest_closed(db_session, True, BASE_TIME)

    assert closed_at == BASE_TIME
    assert await contest_settings.is_contest_closed(db_session) is True
    assert await contest_settings.get_closed_at(db_session) == BASE_TIME

    await contest_settings.set_contest_closed(db_session, False)

    assert await contest_settings.is_contest_closed(db_session) is False
    assert await contest_settings.get_closed_at(db_session) is None


@pytest.mark.asyncio
async def test_set_value_upserts(db_session):
    await contest_settings.set_show_public_scores(db_session, True)
    await contest_settings.set_show_public_scores(db_session, False)
    await contest_settings.set_show_public_scores(db_session, True)

    assert await contest_settings.get_value(db_session, SettingKey.SHOW_PUBLIC_SCORES) == "true"


@pytest.mark.asyncio
async def test_timestamps_are_normalized_to_naive_utc(db_session):
    await contest_settings.set_value(db_session, SettingKey.LAST_INSTAGRAM_SYNC, "2026-03-01T14:00:00+02:00")

    assert await contest_settings.get_last_sync_at(db_session) == datetime(2026, 3, 1, 12, 0, 0)


@pytest.mark.asyncio
async def test_unparseable_timestamp_counts_as_never_synced(db_session):
    await contest_settings.set_value(db_session, SettingKey.LAST_INSTAGRAM_SYNC, "yesterday")

    assert await contest_settings.get_last_sync_at(db_session) is None
