"""Orchestrator wiring, with output paths redirected into tmp_path."""

import pandas as pd
import pytest

import pipeline
import publish_charts
from utils.errors import RenderError


@pytest.fixture
def outputs(tmp_path, monkeypatch):
    out = tmp_path / "outputs"
    paths = {
        "PROJECTIONS_TIDY_PARQUET": out / "projections_tidy.parquet",
        "PROJECTIONS_TIDY_CSV": out / "projections_tidy.csv",
        "EPISODES_CSV": out / "drought_episodes.csv",
        "EPISODE_SUMMARY_CSV": out / "drought_episode_summary.csv",
        "MANIFEST_CSV": out / "chart_manifest.csv",
    }
    for name, path in paths.items():
        monkeypatch.setattr(pipeline, name, str(path))
    return paths


def test_run_projections_writes_tidy_tables(projection_dir, outputs):
    table = pipeline.run_projections(str(projection_dir))

    assert len(table) == 3 * 2 * 4
    written = pd.read_parquet(outputs["PROJECTIONS_TIDY_PARQUET"])
    assert len(written) == len(table)
    assert outputs["PROJECTIONS_TIDY_CSV"].exists()


def test_run_drought_writes_episodes_and_summary(drought_dir, outputs):
    episodes = pipeline.run_drought(str(drought_dir))

    # Far North: 28-30 Dec (3 days), 1-3 Jan (3 days); Hurunui never qualifies
    assert episodes["day_count"].tolist() == [3, 3]
    assert set(episodes["district"]) == {"Far North"}
    summary = pd.read_csv(outputs["EPISODE_SUMMARY_CSV"])
    assert summary["episodes"].tolist() == [2]


def test_generate_outputs_writes_manifest_then_reports_failures(outputs, monkeypatch):
    done = pd.DataFrame([{"file": "rain_1.gif", "entity": "Auckland", "category": "wet-day",
                          "scenarios": "RCP2.6", "frames": 2}])

    def fake_animations(table, category):
        if category == "hot-day":
            raise RenderError("hot failed", entities=["Dunedin"], completed=done.assign(file="hot_1.gif"))
        return done

    def fake_drought(episodes, year):
        return done.assign(file=f"drought_{year}.png", entity=str(year), category="drought")

    monkeypatch.setattr(publish_charts, "publish_projection_animations", fake_animations)
    monkeypatch.setattr(publish_charts, "publish_drought_chart", fake_drought)

    with pytest.raises(RenderError) as excinfo:
        pipeline.generate_outputs(pd.DataFrame(), pd.DataFrame(), drought_year=2020)

    assert excinfo.value.entities == ["Dunedin"]
    manifest = pd.read_csv(outputs["MANIFEST_CSV"])
    assert manifest["file"].tolist() == ["rain_1.gif", "hot_1.gif", "drought_2020.png"]
