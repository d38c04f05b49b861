"""
Public ranking: live likes mode and closed jury mode
"""
import pytest

from contest.orm.video import VideoStatus
from contest.services.ranking_engine import load_ranking_videos, rank, round_score
from contest.tests.factories import add_evaluations, create_entry


async def _ranking(db, closed: bool, show_scores: bool = False, top_n: int = 5):
    return rank(await load_ranking_videos(db), closed, show_scores, top_n)


# =============================================================================
# Live mode
# =============================================================================

@pytest.mark.asyncio
async def test_live_ranking_orders_by_likes(db_session):
    await create_entry(db_session, "forty", likes=40)
    await create_entry(db_session, "fifteen", likes=15)
    await create_entry(db_session, "ninety", likes=90)

    entries = await _ranking(db_session, closed=False)

    assert [e.score for e in entries] == [90, 40, 15]
    assert [e.position for e in entries] == [1, 2, 3]
    assert all(e.is_likes for e in entries)
    assert not any(e.hidden_score for e in entries)
    assert [e.engagement_count for e in entries] == [90, 40, 15]


@pytest.mark.asyncio
async def test_live_ranking_excludes_unsynced_and_unvalidated(db_session):
    synced = await create_entry(db_session, "synced", likes=1)
    await create_entry(db_session, "never_synced", likes=500, synced=False)
    await create_entry(db_session, "pending", likes=300, status=VideoStatus.PENDING_VALIDATION)
    await create_entry(db_session, "rejected", likes=200, status=VideoStatus.REJECTED)

    entries = await _ranking(db_session, closed=False)

    assert [e.video_id for e in entries] == [synced.id]


@pytest.mark.asyncio
async def test_live_ties_go_to_earliest_submission(db_session):
    late = await create_entry(db_session, "late", likes=10, created_offset_minutes=30)
    early = await create_entry(db_session, "early", likes=10, created_offset_minutes=5)

    entries = await _ranking(db_session, closed=False)

    assert [e.video_id for e in entries] == [early.id, late.id]


@pytest.mark.asyncio
async def test_ranking_is_capped_and_deterministic(db_session):
    for index in range(7):
        await create_entry(db_session, f"user{index}", likes=index * 10)

    first = await _ranking(db_session, closed=False)
    second = await _ranking(db_session, closed=False)

    assert len(first) == 5
    assert [e.score for e in first] == [60, 50, 40, 30, 20]
    assert first == second


@pytest.mark.asyncio
async def test_live_entry_carries_participant_identity(db_session):
    await create_entry(db_session, "maria_g", likes=3)

    entry = (await _ranking(db_session, closed=False))[0]

    assert entry.alias == "maria_g"
    assert entry.handle == "maria_g"
    assert entry.stream_url


# =============================================================================
# Closed mode
# =============================================================================

@pytest.mark.asyncio
async def test_closed_ranking_orders_by_jury_average_with_hidden_scores(db_session):
    lower = await create_entry(db_session, "lower", likes=500, closing_likes=500)
    higher = await create_entry(db_session, "higher", likes=5, closing_likes=5)
    await add_evaluations(db_session, lower, [85.0, 86.0])
    await add_evaluations(db_session, higher, [92.0])

    entries = await _ranking(db_session, closed=True, show_scores=False)

    assert [e.video_id for e in entries] == [higher.id, lower.id]
    assert [e.score for e in entries] == [92.0, 85.5]
    assert all(e.hidden_score for e in entries)
    assert not any(e.is_likes for e in entries)
    assert [e.engagement_count for e in entries] == [5, 500]


@pytest.mark.asyncio
async def test_closed_ranking_shows_scores_when_enabled(db_session):
    video = await create_entry(db_session, "only", likes=1)
    await add_evaluations(db_session, video, [70.0])

    entries = await _ranking(db_session, closed=True, show_scores=True)

    assert entries[0].hidden_score is False
    assert entries[0].score == 70.0


@pytest.mark.asyncio
async def test_closed_ranking_includes_unsynced_and_unscored(db_session):
    scored = await create_entry(db_session, "scored", synced=False)
    unscored = await create_entry(db_session, "unscored", likes=1000, synced=False)
    await add_evaluations(db_session, scored, [10.0])

    entries = await _ranking(db_session, closed=True)

    assert [e.video_id for e in entries] == [scored.id, unscored.id]
    assert entries[1].score == 0.0


@pytest.mark.asyncio
async def test_closed_engagement_falls_back_to_live_likes(db_session):
    snapshotted = await create_entry(db_session, "snap", likes=80, closing_likes=50)
    not_snapshotted = await create_entry(db_session, "nosnap", likes=60)
    await add_evaluations(db_session, snapshotted, [90.0])
    await add_evaluations(db_session, not_snapshotted, [90.0])

    entries = await _ranking(db_session, closed=True)

    # Equal averages: higher engagement wins the tie
    assert [e.video_id for e in entries] == [not_snapshotted.id, snapshotted.id]
    assert [e.engagement_count for e in entries] == [60, 50]


@pytest.mark.asyncio
async def test_closed_full_tie_goes_to_earliest_submission(db_session):
    late = await create_entry(db_session, "late", closing_likes=10, created_offset_minutes=20)
    early = await create_entry(db_session, "early", closing_likes=10, created_offset_minutes=1)
    await add_evaluations(db_session, late, [80.0])
    await add_evaluations(db_session, early, [80.0])

    entries = await _ranking(db_session, closed=True)

    assert [e.video_id for e in entries] == [early.id, late.id]


def test_round_score_is_half_up():
    assert round_score(85.25) == 85.3
    assert round_score(85.35) == 85.4
    assert round_score(85.0) == 85.0
    assert round_score(91.66666) == 91.7
