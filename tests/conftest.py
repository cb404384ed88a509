"""Shared fixtures for RadioGlobe tests."""

from collections.abc import Callable
from typing import Any

import pytest

from radioglobe.models import StationRecord


def build_station(uuid: str, **overrides: Any) -> StationRecord:
    """A geo-valid station unless coordinates are overridden."""
    fields: dict[str, Any] = {
        "uuid": uuid,
        "name": f"Station {uuid}",
        "url": f"http://stream.example/{uuid}",
        "url_resolved": f"http://stream.example/{uuid}.mp3",
        "geo_lat": 41.0,
        "geo_long": 29.0,
    }
    fields.update(overrides)
    return StationRecord(**fields)


@pytest.fixture
def make_station() -> Callable[..., StationRecord]:
    return build_station
