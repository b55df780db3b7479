import asyncio
import json

import pytest

from core.exceptions import ErrorCode, MarkerFetchFailedError
from domain.models import Coordinate, Marker
from domain.repositories import MarkerRepository
from fakes import GatedMarkerRepository, StubMarkerRepository
from usecases.markers import MarkerRefresher, RefreshOutcome

CENTER = Coordinate(52.23, 21.01)

PAYLOAD = [
    {"latitude": 52.24, "longitude": 21.02, "name": "ignored"},
    {"latitude": 52.20, "longitude": 20.99},
    {"latitude": 52, "longitude": 21},
]


def coords(markers):
    return [(m.coordinate.latitude, m.coordinate.longitude) for m in markers]


def test_refresh_replaces_state_in_response_order():
    refresher = MarkerRefresher(StubMarkerRepository(PAYLOAD))

    outcome = asyncio.run(refresher.refresh(CENTER))

    assert outcome is RefreshOutcome.APPLIED
    assert coords(refresher.markers) == [(52.24, 21.02), (52.20, 20.99), (52.0, 21.0)]
    assert all(isinstance(m, Marker) for m in refresher.markers)


def test_refresh_is_idempotent_for_same_response():
    repo = StubMarkerRepository(PAYLOAD)
    refresher = MarkerRefresher(repo)

    asyncio.run(refresher.refresh(CENTER))
    first = refresher.markers
    asyncio.run(refresher.refresh(CENTER))

    assert refresher.markers == first
    assert repo.centers == [CENTER, CENTER]


def test_refresh_replaces_rather_than_merges():
    repo = StubMarkerRepository(PAYLOAD)
    refresher = MarkerRefresher(repo)
    asyncio.run(refresher.refresh(CENTER))

    repo.payload = [{"latitude": 1.0, "longitude": 2.0}]
    asyncio.run(refresher.refresh(CENTER))

    assert coords(refresher.markers) == [(1.0, 2.0)]


def test_subscribers_see_each_applied_collection():
    refresher = MarkerRefresher(StubMarkerRepository(PAYLOAD))
    seen = []
    refresher.subscribe(seen.append)

    asyncio.run(refresher.refresh(CENTER))

    assert len(seen) == 1
    assert seen[0] == refresher.markers


def test_failed_status_keeps_last_good_markers():
    repo = StubMarkerRepository(PAYLOAD)
    refresher = MarkerRefresher(repo)
    asyncio.run(refresher.refresh(CENTER))
    before = refresher.markers
    seen = []
    refresher.subscribe(seen.append)

    repo.status_code = 500
    with pytest.raises(MarkerFetchFailedError) as excinfo:
        asyncio.run(refresher.refresh(CENTER))

    assert excinfo.value.code is ErrorCode.MARKER_FETCH_FAILED
    assert excinfo.value.status_code == 500
    assert refresher.markers == before
    assert seen == []


@pytest.mark.parametrize(
    "payload",
    [
        {"latitude": 1.0, "longitude": 2.0},
        [{"latitude": "52.2", "longitude": 21.0}],
        [{"latitude": 52.2}],
        [{"latitude": True, "longitude": 21.0}],
        ["not an object"],
        [{"latitude": float("nan"), "longitude": 21.0}],
        [{"latitude": float("inf"), "longitude": 21.0}],
        [{"latitude": 91.0, "longitude": 21.0}],
        [{"latitude": 52.2, "longitude": -180.5}],
    ],
)
def test_malformed_body_is_a_fetch_failure(payload):
    refresher = MarkerRefresher(StubMarkerRepository(payload))

    with pytest.raises(MarkerFetchFailedError, match="Malformed"):
        asyncio.run(refresher.refresh(CENTER))

    assert refresher.markers == ()


def test_non_finite_json_keeps_last_good_markers():
    repo = StubMarkerRepository(PAYLOAD)
    refresher = MarkerRefresher(repo)
    asyncio.run(refresher.refresh(CENTER))
    before = refresher.markers

    repo.payload = json.loads('[{"latitude": NaN, "longitude": 21.0}, {"latitude": 1000, "longitude": 21.0}]')
    with pytest.raises(MarkerFetchFailedError, match="out of range"):
        asyncio.run(refresher.refresh(CENTER))

    assert refresher.markers == before


def test_boundary_coordinates_are_accepted():
    refresher = MarkerRefresher(StubMarkerRepository([{"latitude": -90, "longitude": 180}]))

    asyncio.run(refresher.refresh(CENTER))

    assert coords(refresher.markers) == [(-90.0, 180.0)]


def test_unexpected_repository_error_is_wrapped():
    class BrokenRepository(MarkerRepository):
        async def fetch(self, center):
            raise ConnectionResetError("peer reset")

    refresher = MarkerRefresher(BrokenRepository())

    with pytest.raises(MarkerFetchFailedError) as excinfo:
        asyncio.run(refresher.refresh(CENTER))

    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


def test_slow_response_times_out():
    refresher = MarkerRefresher(GatedMarkerRepository(), timeout=0.01)

    with pytest.raises(MarkerFetchFailedError, match="timed out"):
        asyncio.run(refresher.refresh(CENTER))


async def _wait_for_requests(repo, count):
    while len(repo.pending) < count:
        await asyncio.sleep(0)


def test_late_response_of_superseded_request_is_discarded():
    a = Coordinate(52.23, 21.01)
    b = Coordinate(50.06, 19.94)
    repo = GatedMarkerRepository()
    refresher = MarkerRefresher(repo)

    async def scenario():
        task_a = asyncio.create_task(refresher.refresh(a))
        task_b = asyncio.create_task(refresher.refresh(b))
        await _wait_for_requests(repo, 2)

        repo.pending[b].set_result([{"latitude": 50.07, "longitude": 19.95}])
        outcome_b = await task_b
        repo.pending[a].set_result([{"latitude": 52.24, "longitude": 21.02}])
        outcome_a = await task_a
        return outcome_a, outcome_b

    outcome_a, outcome_b = asyncio.run(scenario())

    assert outcome_b is RefreshOutcome.APPLIED
    assert outcome_a is RefreshOutcome.DISCARDED
    assert coords(refresher.markers) == [(50.07, 19.95)]


def test_early_response_of_superseded_request_is_discarded():
    a = Coordinate(52.23, 21.01)
    b = Coordinate(50.06, 19.94)
    repo = GatedMarkerRepository()
    refresher = MarkerRefresher(repo)

    async def scenario():
        task_a = asyncio.create_task(refresher.refresh(a))
        task_b = asyncio.create_task(refresher.refresh(b))
        await _wait_for_requests(repo, 2)

        repo.pending[a].set_result([{"latitude": 52.24, "longitude": 21.02}])
        outcome_a = await task_a
        markers_between = refresher.markers
        repo.pending[b].set_result([{"latitude": 50.07, "longitude": 19.95}])
        outcome_b = await task_b
        return outcome_a, outcome_b, markers_between

    outcome_a, outcome_b, markers_between = asyncio.run(scenario())

    assert outcome_a is RefreshOutcome.DISCARDED
    assert markers_between == ()
    assert outcome_b is RefreshOutcome.APPLIED
    assert coords(refresher.markers) == [(50.07, 19.95)]


def test_failure_of_superseded_request_is_not_reported():
    a = Coordinate(52.23, 21.01)
    b = Coordinate(50.06, 19.94)
    repo = GatedMarkerRepository()
    refresher = MarkerRefresher(repo)

    async def scenario():
        task_a = asyncio.create_task(refresher.refresh(a))
        task_b = asyncio.create_task(refresher.refresh(b))
        await _wait_for_requests(repo, 2)

        repo.pending[b].set_result([])
        await task_b
        repo.pending[a].set_exception(MarkerFetchFailedError("HTTP 503", status_code=503))
        return await task_a

    assert asyncio.run(scenario()) is RefreshOutcome.DISCARDED
    assert refresher.generation == 2
