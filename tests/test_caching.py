"""Tests for Redis caching implementation."""

from datetime import time
from unittest.mock import MagicMock

import pytest
import redis

from dental_api.config import settings
from dental_api.core.redis_client import CacheManager
from dental_api.schemas.schedule_config import ScheduleConfigUpsertItem
from dental_api.services.schedule_config_service import ScheduleConfigService


def test_cache_manager_get_json():
    """Test CacheManager get_json method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    # Cache miss
    mock_redis.get.return_value = None
    assert cache_manager.get_json("test_key") is None
    mock_redis.get.assert_called_once_with("test_key")

    # Cache hit
    mock_redis.reset_mock()
    mock_redis.get.return_value = '{"start": "08:00:00", "end": "19:30:00"}'
    assert cache_manager.get_json("test_key") == {"start": "08:00:00", "end": "19:30:00"}

    # Corrupt entries read as a miss
    mock_redis.get.return_value = "{not json"
    assert cache_manager.get_json("test_key") is None


def test_cache_manager_set_json():
    """Test CacheManager set_json method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.set_json("test_key", {"start": "08:00:00"}) is True
    mock_redis.set.assert_called_once_with("test_key", '{"start": "08:00:00"}')

    mock_redis.reset_mock()
    assert cache_manager.set_json("test_key", {"start": "08:00:00"}, ttl=300) is True
    mock_redis.setex.assert_called_once_with("test_key", 300, '{"start": "08:00:00"}')


def test_cache_manager_delete_pattern():
    """Test CacheManager delete_pattern method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    mock_redis.keys.return_value = ["schedule:t1:work_hours", "schedule:t1:other"]
    mock_redis.delete.return_value = 2

    assert cache_manager.delete_pattern("schedule:t1:*") == 2
    mock_redis.keys.assert_called_once_with("schedule:t1:*")
    mock_redis.delete.assert_called_once_with("schedule:t1:work_hours", "schedule:t1:other")

    mock_redis.reset_mock()
    mock_redis.keys.return_value = []
    assert cache_manager.delete_pattern("schedule:t2:*") == 0
    mock_redis.delete.assert_not_called()


def test_cache_manager_fails_open():
    """A Redis outage turns reads into misses and writes into no-ops."""
    mock_redis = MagicMock()
    mock_redis.get.side_effect = redis.ConnectionError("down")
    mock_redis.set.side_effect = redis.ConnectionError("down")
    mock_redis.setex.side_effect = redis.ConnectionError("down")
    mock_redis.keys.side_effect = redis.ConnectionError("down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.get_json("key") is None
    assert cache_manager.set_json("key", {"a": 1}) is False
    assert cache_manager.set_json("key", {"a": 1}, ttl=60) is False
    assert cache_manager.delete_pattern("key:*") == 0


@pytest.mark.asyncio
async def test_work_hours_served_from_cache(db_session, tenant):
    """A cached entry short-circuits the database query."""
    cache = MagicMock()
    cache.get_json.return_value = {"start": "07:30:00", "end": "20:00:00"}

    service = ScheduleConfigService(db_session, cache)
    start, end = await service.get_consolidated_work_hours(tenant["id"])

    assert (start, end) == (time(7, 30), time(20, 0))
    cache.get_json.assert_called_once_with(f"schedule:{tenant['id']}:work_hours")
    cache.set_json.assert_not_called()


@pytest.mark.asyncio
async def test_work_hours_cached_after_miss(db_session, tenant):
    """A miss computes the hours and stores them with the configured TTL."""
    cache = MagicMock()
    cache.get_json.return_value = None

    service = ScheduleConfigService(db_session, cache)
    start, end = await service.get_consolidated_work_hours(tenant["id"])

    assert (start, end) == (settings.default_day_start, settings.default_day_end)
    cache.set_json.assert_called_once_with(
        f"schedule:{tenant['id']}:work_hours",
        {"start": start.isoformat(), "end": end.isoformat()},
        ttl=settings.schedule_cache_ttl,
    )


@pytest.mark.asyncio
async def test_upsert_invalidates_tenant_schedule_cache(db_session, tenant, dentist_p):
    """Saving working hours drops every cached schedule entry of the clinic."""
    cache = MagicMock()
    cache.get_json.return_value = None
    service = ScheduleConfigService(db_session, cache)

    await service.upsert_schedule(
        tenant["id"],
        dentist_p["id"],
        [
            ScheduleConfigUpsertItem(
                day_of_week=1,
                is_working_day=True,
                morning_start_time=time(8, 0),
                morning_end_time=time(12, 0),
            )
        ],
    )

    cache.delete_pattern.assert_called_once_with(f"schedule:{tenant['id']}:*")


@pytest.mark.asyncio
async def test_schedule_rows_cached_after_miss(db_session, tenant, dentist_p):
    """Rows read from the database are stored as JSON under the owner's key."""
    await ScheduleConfigService(db_session).upsert_schedule(
        tenant["id"],
        dentist_p["id"],
        [
            ScheduleConfigUpsertItem(
                day_of_week=2,
                is_working_day=True,
                morning_start_time=time(9, 0),
                morning_end_time=time(13, 0),
            )
        ],
    )
    cache = MagicMock()
    cache.get_json.return_value = None

    rows = await ScheduleConfigService(db_session, cache).get_schedule(
        tenant["id"], dentist_p["id"]
    )

    assert [row.day_of_week for row in rows] == [2]
    key, payload = cache.set_json.call_args.args
    assert key == f"schedule:{tenant['id']}:rows:{dentist_p['id']}"
    assert payload[0]["morning_start_time"] == "09:00:00"
    assert payload[0]["practitioner_id"] == str(dentist_p["id"])
    assert cache.set_json.call_args.kwargs == {"ttl": settings.schedule_cache_ttl}


@pytest.mark.asyncio
async def test_schedule_rows_served_from_cache(db_session, tenant):
    """A cached clinic schedule is returned without touching the database."""
    cached_row = {
        "id": "9a1f2c3d-4e5f-4a6b-8c7d-0e1f2a3b4c5d",
        "practitioner_id": None,
        "day_of_week": 6,
        "is_working_day": True,
        "morning_start_time": "08:00:00",
        "morning_end_time": "12:00:00",
        "afternoon_start_time": None,
        "afternoon_end_time": None,
        "appointment_duration": 20,
        "is_active": True,
    }
    cache = MagicMock()
    cache.get_json.return_value = [cached_row]

    rows = await ScheduleConfigService(db_session, cache).get_schedule(tenant["id"])

    cache.get_json.assert_called_once_with(f"schedule:{tenant['id']}:rows:clinic")
    cache.set_json.assert_not_called()
    assert rows[0].appointment_duration == 20
    assert rows[0].morning_start_time == time(8, 0)
