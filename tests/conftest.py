import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from meeting_analyzer.loader import prepare_sightings

BASE_TIME = pd.Timestamp("2017-07-19T08:00:00")


def make_sightings(records):
    """Build a sighting frame from (seconds, uid, floor, x, y) tuples."""
    return prepare_sightings(pd.DataFrame({
        "timestamp": [BASE_TIME + pd.Timedelta(seconds=r[0]) for r in records],
        "x": [r[3] for r in records],
        "y": [r[4] for r in records],
        "floor": [r[2] for r in records],
        "uid": [r[1] for r in records],
    }))


@pytest.fixture
def sightings():
    return make_sightings


@pytest.fixture
def scenario_a():
    return make_sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 1.0, 0.0),
    ])
