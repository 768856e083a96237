import pandas as pd
import pytest

from data_transform.episodes import (
    qualifying_days, assign_episode_ids, segment_episodes, select_window, select_year,
)
from conftest import drought_observations


def _episode(district, episode_id, day_count, start, end):
    return {"district": district, "episode_id": episode_id, "day_count": day_count,
            "start_date": pd.Timestamp(start), "end_date": pd.Timestamp(end)}


def test_consecutive_days_form_one_episode_and_gaps_split():
    obs = drought_observations({"X": ["2020-01-01", "2020-01-02", "2020-01-03", "2020-01-10"]})

    episodes = segment_episodes(obs)

    assert episodes.to_dict("records") == [
        _episode("X", 1, 3, "2020-01-01", "2020-01-03"),
        _episode("X", 2, 1, "2020-01-10", "2020-01-10"),
    ]


def test_day_count_matches_span_and_partitions_days():
    dates = ["2020-01-30", "2020-01-31", "2020-02-01", "2020-02-28", "2020-02-29",
             "2020-03-01", "2020-03-05", "2020-12-31", "2021-01-01"]
    obs = drought_observations({"X": dates, "Y": dates[:4]})

    episodes = segment_episodes(obs)

    spans = (episodes["end_date"] - episodes["start_date"]).dt.days + 1
    assert (episodes["day_count"] == spans).all()
    assert episodes["day_count"].sum() == len(qualifying_days(obs))
    x = episodes[episodes["district"] == "X"]
    assert x["day_count"].tolist() == [3, 3, 1, 2]


def test_episodes_within_district_are_ordered_and_disjoint():
    obs = drought_observations({"X": ["2020-03-01", "2020-01-01", "2020-01-02", "2020-02-01"]})
    episodes = segment_episodes(obs)

    assert episodes["episode_id"].tolist() == [1, 2, 3]
    assert episodes["start_date"].is_monotonic_increasing
    assert (episodes["start_date"].iloc[1:].values > episodes["end_date"].iloc[:-1].values).all()


def test_episode_ids_restart_per_district():
    obs = drought_observations({"A": ["2020-01-01", "2020-01-05"], "B": ["2020-01-02"]})
    episodes = segment_episodes(obs)

    assert list(zip(episodes["district"], episodes["episode_id"])) == [("A", 1), ("A", 2), ("B", 1)]


def test_threshold_is_inclusive():
    obs = drought_observations({"X": ["2020-01-01", "2020-01-02", "2020-01-03"]})
    obs["index_value"] = [1.5, 1.49, 1.5]

    episodes = segment_episodes(obs, threshold=1.5)

    assert episodes["day_count"].tolist() == [1, 1]


def test_single_isolated_day():
    obs = drought_observations({"X": ["2020-06-15"]})
    ep = segment_episodes(obs).iloc[0]
    assert ep["day_count"] == 1
    assert ep["start_date"] == ep["end_date"] == pd.Timestamp("2020-06-15")


def test_district_without_drought_days_has_no_episodes():
    obs = pd.concat([
        drought_observations({"Dry": ["2020-01-01"], "Wet": []}),
        drought_observations({"Dry": [], "Wet": ["2020-01-01", "2020-01-02"]}, value=0.2),
    ], ignore_index=True)
    obs["district"] = pd.Categorical(obs["district"], categories=["Dry", "Wet"])

    episodes = segment_episodes(obs)

    assert episodes["district"].tolist() == ["Dry"]


def test_no_qualifying_days_gives_empty_typed_table():
    obs = drought_observations({"X": ["2020-01-01"]}, value=0.1)
    episodes = segment_episodes(obs)

    assert episodes.empty
    assert list(episodes.columns) == ["district", "episode_id", "day_count", "start_date", "end_date"]
    assert pd.api.types.is_datetime64_any_dtype(episodes["start_date"])


def test_duplicate_dates_count_once():
    obs = drought_observations({"X": ["2020-01-01", "2020-01-01", "2020-01-02"]})
    episodes = segment_episodes(obs)
    assert episodes["day_count"].tolist() == [2]


def test_missing_values_do_not_qualify():
    obs = drought_observations({"X": ["2020-01-01", "2020-01-02", "2020-01-03"]})
    obs.loc[1, "index_value"] = float("nan")
    assert segment_episodes(obs)["day_count"].tolist() == [1, 1]


def test_assign_episode_ids_does_not_mutate_input():
    days = qualifying_days(drought_observations({"X": ["2020-01-01", "2020-01-02"]}))
    out = assign_episode_ids(days)
    assert "episode_id" not in days.columns
    assert out["episode_id"].tolist() == [1, 1]


@pytest.fixture
def boundary_episodes():
    return pd.DataFrame([
        _episode("X", 1, 5, "2019-10-15", "2019-10-19"),
        _episode("X", 2, 30, "2019-12-15", "2020-01-13"),
        _episode("X", 3, 2, "2019-11-01", "2019-11-02"),
        _episode("X", 4, 10, "2020-07-01", "2020-07-10"),
        _episode("X", 5, 3, "2020-12-31", "2021-01-02"),
        _episode("X", 6, 1, "2021-01-01", "2021-01-01"),
    ])


def test_select_year_carries_back_last_two_months(boundary_episodes):
    selected = select_year(boundary_episodes, 2020)
    assert selected["episode_id"].tolist() == [2, 3, 4, 5]


def test_select_year_without_carry_back(boundary_episodes):
    selected = select_year(boundary_episodes, 2020, carry_back_months=0)
    assert selected["episode_id"].tolist() == [4, 5]


def test_select_window_explicit_bounds(boundary_episodes):
    selected = select_window(boundary_episodes, "2020-07-01", "2020-07-31", carry_back_months=0)
    assert selected["episode_id"].tolist() == [4]
