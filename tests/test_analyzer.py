import pandas as pd
import pytest

from meeting_analyzer.analyzer import (
    STATUS_MEETING,
    STATUS_NO_MEETING,
    STATUS_SAME_USER,
    STATUS_USER_NOT_FOUND,
    MeetingAnalyzer,
    find_meetings,
    resolve,
)
from meeting_analyzer.reconstructor import LastSeenReconstructor
from meeting_analyzer.report import NO_MEETING_TEXT, NOT_FOUND_TEXT, SAME_USER_TEXT

from conftest import BASE_TIME


def test_scenario_a_meeting(scenario_a) -> None:
    result = MeetingAnalyzer().analyze("a", "b", scenario_a)

    assert result.status == STATUS_MEETING
    assert result.met
    assert result.meeting.timestamp == BASE_TIME + pd.Timedelta(seconds=10)
    assert result.meeting.floor == 1
    assert result.meeting.distance == 1.0
    assert result.meeting.elapsed_seconds == 10.0
    assert result.meeting.confidence == 1


def test_scenario_b_different_floors(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 2, 1.0, 0.0),
    ])

    result = MeetingAnalyzer().analyze("a", "b", data)

    assert result.status == STATUS_NO_MEETING
    assert result.meeting is None
    assert not result.met


def test_scenario_c_stale_sighting(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (200, "b", 1, 1.0, 0.0),
    ])

    assert MeetingAnalyzer().analyze("a", "b", data).status == STATUS_NO_MEETING


def test_scenario_d_user_not_found_skips_reconstruction(scenario_a, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("reconstruction should not run")

    monkeypatch.setattr(LastSeenReconstructor, "reconstruct", fail)

    result = MeetingAnalyzer().analyze("a", "nobody", scenario_a)

    assert result.status == STATUS_USER_NOT_FOUND
    assert not result.found
    assert result.meeting is None
    assert result.candidates is None


def test_one_user_only_dataset_is_not_found(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "a", 1, 1.0, 0.0),
    ])

    assert MeetingAnalyzer().analyze("a", "b", data).status == STATUS_USER_NOT_FOUND


def test_scenario_e_earliest_candidate_wins(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (5, "b", 1, 1.0, 0.0),
        (8, "a", 1, 1.5, 0.0),
    ])

    result = MeetingAnalyzer().analyze("a", "b", data)

    assert result.meeting.timestamp == BASE_TIME + pd.Timedelta(seconds=5)
    assert result.meeting.uid == "b"
    assert result.meeting.confidence == 2


def test_resolve_picks_earliest_of_unordered_candidates() -> None:
    candidates = pd.DataFrame({
        "timestamp": [BASE_TIME + pd.Timedelta(seconds=8), BASE_TIME + pd.Timedelta(seconds=5)],
        "uid": ["a", "b"],
        "floor": [1, 1],
        "x": [1.5, 1.0],
        "y": [0.0, 0.0],
        "distance": [0.5, 1.0],
        "elapsed_seconds": [3.0, 5.0],
    })

    meeting = resolve(candidates)

    assert meeting.timestamp == BASE_TIME + pd.Timedelta(seconds=5)
    assert meeting.x == 1.0
    assert meeting.confidence == 2


def test_resolve_empty_is_none() -> None:
    assert resolve(pd.DataFrame(columns=["timestamp"])) is None


def test_analyze_is_idempotent(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (5, "b", 1, 1.0, 0.0),
        (8, "a", 1, 1.5, 0.0),
        (300, "b", 1, 1.5, 0.0),
    ])
    snapshot = data.copy()
    analyzer = MeetingAnalyzer()

    first = analyzer.analyze("a", "b", data)
    second = analyzer.analyze("a", "b", data)

    assert first.meeting == second.meeting
    pd.testing.assert_frame_equal(first.candidates, second.candidates)
    pd.testing.assert_frame_equal(data, snapshot)


def test_find_meetings_returns_report_text(scenario_a, capsys) -> None:
    text = MeetingAnalyzer().find_meetings("a", "b", scenario_a)

    assert "met the first time at 2017-07-19 08:00:10" in text
    assert text in capsys.readouterr().out


def test_find_meetings_return_met(scenario_a, sightings) -> None:
    far = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 10.0, 0.0),
    ])

    assert find_meetings("a", "b", scenario_a, return_met=True) is True
    assert find_meetings("a", "b", far, return_met=True) is False
    assert find_meetings("a", "x", far, return_met=True) is None


def test_find_meetings_notices(scenario_a, sightings, capsys) -> None:
    far = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 10.0, 0.0),
    ])

    assert find_meetings("a", None, scenario_a) == NOT_FOUND_TEXT
    assert find_meetings("a", "b", far) == NO_MEETING_TEXT
    out = capsys.readouterr().out
    assert NOT_FOUND_TEXT in out
    assert NO_MEETING_TEXT in out


def test_find_meetings_plots_distance(sightings, tmp_path) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 1.0, 0.0),
        (20, "a", 1, 8.0, 0.0),
    ])

    MeetingAnalyzer().find_meetings("a", "b", data, plot_distance=True, output_dir=tmp_path)

    assert (tmp_path / "distance_a_b.png").exists()


def test_find_meetings_plot_skipped_for_missing_user(scenario_a, tmp_path) -> None:
    MeetingAnalyzer().find_meetings("a", "x", scenario_a, plot_distance=True, output_dir=tmp_path)

    assert not list(tmp_path.iterdir())


def test_config_thresholds_are_used(sightings) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 1.0, 0.0),
    ])
    config = {
        "thresholds": {"max_staleness_seconds": 5, "max_distance_meters": 2},
        "output": {"directory": "output"},
        "batch": {"workers": 1},
    }

    assert not MeetingAnalyzer(config).analyze("a", "b", data).met


@pytest.mark.parametrize("workers", [1, 2])
def test_find_all_meetings(sightings, workers) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 1.0, 0.0),
        (12, "c", 1, 50.0, 50.0),
        (20, "a", 1, 0.0, 0.5),
    ])

    pairs = MeetingAnalyzer().find_all_meetings(data, workers=workers)

    assert list(pairs.columns) == ["uid1", "uid2", "met"]
    assert len(pairs) == 3
    met = {(row.uid1, row.uid2) for row in pairs.itertuples() if row.met}
    assert met == {("a", "b")}


def test_same_user_twice_is_a_notice(scenario_a, capsys) -> None:
    result = MeetingAnalyzer().analyze("a", "a", scenario_a)

    assert result.status == STATUS_SAME_USER
    assert not result.found
    assert not result.met
    assert find_meetings("a", "a", scenario_a) == SAME_USER_TEXT
    assert find_meetings("a", "a", scenario_a, return_met=True) is None
    assert SAME_USER_TEXT in capsys.readouterr().out


def test_sequential_sweep_passes_only_pair_sightings(sightings, monkeypatch) -> None:
    data = sightings([
        (0, "a", 1, 0.0, 0.0),
        (10, "b", 1, 1.0, 0.0),
        (12, "c", 1, 50.0, 50.0),
        (14, "c", 1, 50.0, 51.0),
        (20, "a", 1, 0.0, 0.5),
    ])
    seen = {}
    analyze = MeetingAnalyzer.analyze

    def recording_analyze(self, uid1, uid2, pair_data):
        seen[(uid1, uid2)] = set(pair_data["uid"])
        return analyze(self, uid1, uid2, pair_data)

    monkeypatch.setattr(MeetingAnalyzer, "analyze", recording_analyze)

    pairs = MeetingAnalyzer().find_all_meetings(data, workers=1)

    assert seen == {("a", "b"): {"a", "b"}, ("a", "c"): {"a", "c"}, ("b", "c"): {"b", "c"}}
    assert pairs["met"].tolist() == [True, False, False]
