"""
Tests for AnalysisSession request ordering
"""

import random
import threading
from types import SimpleNamespace

import pytest

from conftest import TIMES_SQUARE
from location_insight.pipeline import LocationAnalysisPipeline
from location_insight.session import AnalysisSession, MAP_CHANNEL, STREET_VIEW_CHANNEL


class GatedPipeline:
    """Map calls for locations listed in ``gates`` block until the gate is set"""

    def __init__(self, gates=None, failures=()):
        self.gates = gates or {}
        self.failures = set(failures)

    def analyze_map(self, location, coordinates, request_id=None):
        gate = self.gates.get(location)
        if gate is not None:
            assert gate.wait(timeout=5)
        if location in self.failures:
            raise RuntimeError(f"analysis of {location} failed")
        return SimpleNamespace(location=location, request_id=request_id)

    def analyze_street_view(self, location, coordinates, heading=0.0, pitch=0.0, request_id=None):
        return SimpleNamespace(location=location, heading=heading, pitch=pitch, request_id=request_id)


def test_stale_result_is_discarded():
    release = threading.Event()
    pipeline = GatedPipeline(gates={"Slow Town": release})
    delivered = []

    with AnalysisSession(pipeline, max_workers=2) as session:
        slow = session.submit_map("Slow Town", TIMES_SQUARE, on_result=delivered.append)
        fast = session.submit_map("Fast City", TIMES_SQUARE, on_result=delivered.append)
        assert fast.result(timeout=5).location == "Fast City"
        release.set()
        assert slow.result(timeout=5).location == "Slow Town"

    # The slow answer resolved last but belonged to an older request
    assert [r.location for r in delivered] == ["Fast City"]
    assert session.latest(MAP_CHANNEL).location == "Fast City"
    assert session.latest(MAP_CHANNEL).request_id == 2


def test_channels_are_independent():
    delivered = []

    with AnalysisSession(GatedPipeline()) as session:
        session.submit_map("Times Square New York", TIMES_SQUARE, on_result=delivered.append)
        session.submit_street_view("Times Square New York", TIMES_SQUARE, heading=45, on_result=delivered.append)

    assert len(delivered) == 2
    assert session.latest(MAP_CHANNEL).location == "Times Square New York"
    assert session.latest(STREET_VIEW_CHANNEL).heading == 45


def test_error_delivered_to_latest_request_only():
    release = threading.Event()
    pipeline = GatedPipeline(gates={"Broken Old": release}, failures={"Broken Old", "Broken New"})
    errors = []

    with AnalysisSession(pipeline, max_workers=2) as session:
        old = session.submit_map("Broken Old", TIMES_SQUARE, on_error=errors.append)
        new = session.submit_map("Broken New", TIMES_SQUARE, on_error=errors.append)
        with pytest.raises(RuntimeError):
            new.result(timeout=5)
        release.set()
        with pytest.raises(RuntimeError):
            old.result(timeout=5)

    assert [str(e) for e in errors] == ["analysis of Broken New failed"]
    assert session.latest(MAP_CHANNEL) is None
    assert isinstance(session.latest_error(MAP_CHANNEL), RuntimeError)


def test_is_current_tracks_newest_id():
    with AnalysisSession(GatedPipeline()) as session:
        session.submit_map("A", TIMES_SQUARE)
        session.submit_map("B", TIMES_SQUARE)

    assert not session.is_current(MAP_CHANNEL, 1)
    assert session.is_current(MAP_CHANNEL, 2)


def test_newer_delivery_waits_for_callback_in_progress():
    # "Old" is accepted and its callback is still running when "New" resolves
    old_gate, new_gate = threading.Event(), threading.Event()
    in_callback = threading.Event()
    go = threading.Event()
    new_delivered = threading.Event()
    delivered = []

    def slow_render(result):
        in_callback.set()
        assert go.wait(timeout=5)
        delivered.append(result.location)

    def render(result):
        delivered.append(result.location)
        new_delivered.set()

    pipeline = GatedPipeline(gates={"Old": old_gate, "New": new_gate})
    with AnalysisSession(pipeline, max_workers=2) as session:
        session.submit_map("Old", TIMES_SQUARE, on_result=slow_render)
        old_gate.set()
        assert in_callback.wait(timeout=5)
        new = session.submit_map("New", TIMES_SQUARE, on_result=render)
        new_gate.set()
        assert new.result(timeout=5).location == "New"
        new_delivered.wait(timeout=0.3)
        go.set()

    # The last callback to run carries the newest result
    assert delivered == ["Old", "New"]
    assert session.latest(MAP_CHANNEL).location == "New"


def test_single_worker_session_is_reproducible(offline_config):
    runs = []
    for _ in range(2):
        pipeline = LocationAnalysisPipeline(config=offline_config, rng=random.Random(5))
        with AnalysisSession(pipeline, max_workers=1) as session:
            first = session.submit_map("Brooklyn Heights", (40.6959, -73.9956))
            second = session.submit_map("Times Square New York", TIMES_SQUARE)
            runs.append([first.result(timeout=10), second.result(timeout=10)])

    for a, b in zip(*runs):
        assert a.analysis == b.analysis
        assert a.detection.buildings == b.detection.buildings
        assert a.detection.total_objects == b.detection.total_objects
