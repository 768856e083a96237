"""Shared builders for small projection and drought inputs."""

import pandas as pd
import pytest

PROJECTION_HEADER = [
    "Year", "ACCESS1-0 RCP8.5",
    "Average RCP2.6", "Average RCP4.5", "Average RCP6.0", "Average RCP8.5",
]


def projection_rows(years, base):
    """One row per year; the four averages are base, base+1, base+2, base+3."""
    return [
        [str(y), str(base + 10), str(base), str(base + 1), str(base + 2), str(base + 3)]
        for y in years
    ]


def raw_projection_frame(tagged_rows: dict) -> pd.DataFrame:
    """{tag: rows} -> the table the loader would produce."""
    frames = []
    for tag, rows in tagged_rows.items():
        df = pd.DataFrame(rows, columns=PROJECTION_HEADER, dtype=str)
        df["source_tag"] = tag
        frames.append(df)
    return pd.concat(frames, ignore_index=True)


def write_csv(directory, name, header, rows):
    path = directory / name
    lines = [",".join(header)] + [",".join(r) for r in rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def projection_dir(tmp_path):
    d = tmp_path / "projections"
    d.mkdir()
    write_csv(d, "dunedin_hot-day_winter.csv", PROJECTION_HEADER, projection_rows([1971, 1972, 1973], 1))
    write_csv(d, "auckland_wet-day_summer.csv", PROJECTION_HEADER, projection_rows([1971, 1972, 1973], 10))
    write_csv(d, "new-plymouth_wet-day_spring.csv", PROJECTION_HEADER, projection_rows([1971, 1972, 1973], 20))
    return d


@pytest.fixture
def drought_dir(tmp_path):
    d = tmp_path / "drought"
    d.mkdir()
    header = ["Date", "Indicator", "Value"]
    far_north = []
    for day, value in zip(pd.date_range("2019-12-28", periods=8), [1.6, 1.7, 1.5, 1.2, 1.8, 1.9, 2.0, 0.4]):
        far_north.append([day.strftime("%Y-%m-%d"), "NZDI", str(value)])
        far_north.append([day.strftime("%Y-%m-%d"), "SPI", "3.0"])
    write_csv(d, "far-north.csv", header, far_north)

    hurunui = [[day.strftime("%Y-%m-%d"), "NZDI", "0.5"] for day in pd.date_range("2020-01-01", periods=5)]
    write_csv(d, "hurunui.csv", header, hurunui)
    return d


def drought_observations(district_dates: dict, value: float = 2.0) -> pd.DataFrame:
    """{district: [dates]} -> reshaped drought observations, all at `value`."""
    rows = [
        {"district": district, "date": pd.Timestamp(d), "indicator_type": "NZDI", "index_value": value}
        for district, dates in district_dates.items()
        for d in dates
    ]
    df = pd.DataFrame(rows, columns=["district", "date", "indicator_type", "index_value"])
    df["district"] = pd.Categorical(df["district"], categories=sorted(district_dates))
    df["date"] = pd.to_datetime(df["date"])
    return df
