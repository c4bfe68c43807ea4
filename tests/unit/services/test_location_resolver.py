"""
Unit Tests for Location Resolver

Live fix, timeout race, cache fallback and the (0, 0) sentinel.
"""

import asyncio

import pytest

from havyn.domain.models.geo import GeoPoint, LocationRecord
from havyn.domain.models.user_account import UserAccount
from havyn.services.alerting.location_resolver import LocationResolver

from tests.fakes import (
    FIXED_NOW,
    DeniedSensor,
    FixedSensor,
    HangingSensor,
    InMemoryUserAccountStore,
)


MUMBAI = GeoPoint(lat=19.076, lng=72.8777)
PUNE = GeoPoint(lat=18.5204, lng=73.8567)


@pytest.fixture
def cached_store():
    return InMemoryUserAccountStore([
        UserAccount(
            user_id="user-1",
            email="asha@example.com",
            location=LocationRecord(point=PUNE, updated_at=FIXED_NOW),
        ),
    ])


@pytest.fixture
def empty_store():
    return InMemoryUserAccountStore([
        UserAccount(user_id="user-1", email="asha@example.com"),
    ])


def make_resolver(store, timeout=0.05):
    return LocationResolver(store, timeout_seconds=timeout, clock=lambda: FIXED_NOW)


class TestLiveLocation:

    async def test_returns_live_point(self, cached_store):
        """A sensor answering in time wins over the cache."""
        point = await make_resolver(cached_store).resolve("user-1", FixedSensor(MUMBAI))

        assert point == MUMBAI

    async def test_live_point_is_cached(self, empty_store):
        await make_resolver(empty_store).resolve("user-1", FixedSensor(MUMBAI))

        assert empty_store.location_writes == [("user-1", MUMBAI, FIXED_NOW)]
        record = await empty_store.get_cached_location("user-1")
        assert record.point == MUMBAI

    async def test_cache_write_failure_is_ignored(self, empty_store):
        empty_store.fail_writes = True

        point = await make_resolver(empty_store).resolve("user-1", FixedSensor(MUMBAI))

        assert point == MUMBAI

    async def test_sentinel_live_point_falls_back_to_cache(self, cached_store):
        """(0, 0) is 'unknown', never the Gulf of Guinea."""
        point = await make_resolver(cached_store).resolve(
            "user-1", FixedSensor(GeoPoint(lat=0.0, lng=0.0))
        )

        assert point == PUNE
        assert cached_store.location_writes == []


class TestFallback:

    async def test_timeout_returns_cached_point(self, cached_store):
        sensor = HangingSensor()

        point = await make_resolver(cached_store).resolve("user-1", sensor)

        assert point == PUNE
        assert sensor.cancelled is True

    async def test_sensor_error_returns_cached_point(self, cached_store):
        point = await make_resolver(cached_store).resolve("user-1", DeniedSensor())

        assert point == PUNE

    async def test_no_sensor_uses_cache(self, cached_store):
        point = await make_resolver(cached_store).resolve("user-1")

        assert point == PUNE

    async def test_nothing_available_returns_none(self, empty_store):
        point = await make_resolver(empty_store).resolve("user-1", HangingSensor())

        assert point is None

    async def test_sentinel_cached_point_returns_none(self):
        store = InMemoryUserAccountStore([
            UserAccount(
                user_id="user-1",
                location=LocationRecord(point=GeoPoint(lat=0.0, lng=0.0)),
            ),
        ])

        assert await make_resolver(store).resolve("user-1", DeniedSensor()) is None

    async def test_store_failure_returns_none(self, cached_store):
        cached_store.fail_reads = True

        assert await make_resolver(cached_store).resolve("user-1", DeniedSensor()) is None

    async def test_unknown_user_returns_none(self, empty_store):
        assert await make_resolver(empty_store).resolve("ghost", DeniedSensor()) is None


class TestTimeoutBound:

    async def test_hanging_sensor_is_bounded(self, empty_store):
        """The race always finishes close to the timeout."""
        resolver = make_resolver(empty_store, timeout=0.05)

        point = await asyncio.wait_for(resolver.resolve("user-1", HangingSensor()), timeout=2.0)

        assert point is None

    def test_default_timeout_from_settings(self, empty_store):
        assert LocationResolver(empty_store).timeout_seconds == 5.0
