"""
Shared fixtures for the location insight tests
"""

import random
import sys
from pathlib import Path

import pytest
import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from location_insight.config import InsightConfig
from location_insight.pipeline import LocationAnalysisPipeline


TIMES_SQUARE = (40.7580, -73.9855)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """
    Stands in for requests.Session

    ``routes`` maps a URL to a FakeResponse or an exception instance to raise.
    Unrouted URLs raise ConnectionError.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.routes.get(url)
        if outcome is None:
            raise requests.exceptions.ConnectionError(f"Failed to reach {url}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def place(title, categories=(), lat=40.758, lng=-73.985):
    """HERE item dict; ``categories`` is a list of (id, name) pairs"""
    return {
        "title": title,
        "position": {"lat": lat, "lng": lng},
        "categories": [{"id": cid, "name": name} for cid, name in categories],
    }


@pytest.fixture()
def offline_config() -> InsightConfig:
    return InsightConfig(enable_place_data=False)


@pytest.fixture()
def offline_pipeline(offline_config) -> LocationAnalysisPipeline:
    return LocationAnalysisPipeline(config=offline_config, rng=random.Random(7))
