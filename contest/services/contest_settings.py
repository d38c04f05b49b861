"""
Contest Settings Service

Typed accessors over the contest_settings key/value table.
Nothing is cached: every call reads or writes the store.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contest.orm.base import utcnow
from contest.orm.contest_setting import ContestSetting, SettingKey

logger = logging.getLogger(__name__)


async def get_value(db: AsyncSession, key: str) -> Optional[str]:
    result = await db.execute(select(ContestSetting.value).where(ContestSetting.key == key))
    return result.scalar_one_or_none()


async def set_value(db: AsyncSession, key: str, value: Optional[str]) -> None:
    """Upsert a setting row and commit"""
    result = await db.execute(select(ContestSetting).where(ContestSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        db.add(ContestSetting(key=key, value=value))
    else:
        setting.value = value
    await db.commit()


async def delete_value(db: AsyncSession, key: str) -> None:
    result = await db.execute(select(ContestSetting).where(ContestSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is not None:
        await db.delete(setting)
        await db.commit()


def _parse_bool(value: Optional[str]) -> bool:
    return value == "true"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable timestamp setting: {value!r}")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


async def is_contest_closed(db: AsyncSession) -> bool:
    return _parse_bool(await get_value(db, SettingKey.IS_CLOSED))


async def show_public_scores(db: AsyncSession) -> bool:
    """Defaults to hidden when never set"""
    return _parse_bool(await get_value(db, SettingKey.SHOW_PUBLIC_SCORES))


async def get_closed_at(db: AsyncSession) -> Optional[datetime]:
    return _parse_timestamp(await get_value(db, SettingKey.CLOSED_AT))


async def get_last_sync_at(db: AsyncSession) -> Optional[datetime]:
    return _parse_timestamp(await get_value(db, SettingKey.LAST_INSTAGRAM_SYNC))


async def record_sync(db: AsyncSession, when: Optional[datetime] = None) -> datetime:
    """Persist the completion time of a sync"""
    when = when or utcnow()
    await set_value(db, SettingKey.LAST_INSTAGRAM_SYNC, when.isoformat())
    return when


async def set_contest_closed(db: AsyncSession, closed: bool, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Open or close the contest.

    Closing records CONTEST_CLOSED_AT; reopening clears it. The closing
    likes snapshot is a separate admin operation.
    """
    await set_value(db, SettingKey.IS_CLOSED, "true" if closed else "false")
    if closed:
        closed_at = now or utcnow()
        await set_value(db, SettingKey.CLOSED_AT, closed_at.isoformat())
        logger.info(f"Contest closed at {closed_at.isoformat()}")
        return closed_at

    await delete_value(db, SettingKey.CLOSED_AT)
    logger.info("Contest reopened")
    return None


async def set_show_public_scores(db: AsyncSession, show: bool) -> None:
    await set_value(db, SettingKey.SHOW_PUBLIC_SCORES, "true" if show else "false")
    logger.info(f"Public scores {'visible' if show else 'hidden'}")
