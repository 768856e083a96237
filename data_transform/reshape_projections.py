"""
Reshape the concatenated climate projection files into one long table:
- tag <location>_<category>_<season> -> three typed fields
- location/season re-levelled to fixed north-to-south / seasonal order
- multi-model-mean scenario columns melted into (scenario, day_count)
- the incomplete first year dropped
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from config import (
    TAG_COL, PROJECTION_TAG_FIELDS, LOCATION_ORDER, SEASON_ORDER, CATEGORIES,
    SCENARIO_LABELS, SCENARIO_PREFIX, EXCLUDED_YEAR, COERCION_TOLERANCE,
)
from data_transform.common import (
    normalize_columns, require_columns, split_tag, title_text, relevel, coerce_numeric,
)
from utils.errors import SchemaError

logger = logging.getLogger(__name__)

ID_COLUMNS = ["location", "category", "season", "year"]
VALUE_COL = "day_count"
OUTPUT_COLUMNS = ID_COLUMNS + ["scenario", VALUE_COL]


def scenario_columns(labels: Sequence[str] = SCENARIO_LABELS, prefix: str = SCENARIO_PREFIX) -> dict:
    """Normalised column name -> scenario label, e.g. 'average_rcp4.5' -> 'RCP4.5'."""
    return {f"{prefix}{label.lower()}": label for label in labels}


def _coerce_year(series: pd.Series) -> pd.Series:
    years = pd.to_numeric(series.astype(str).str.strip(), errors="coerce")
    bad = years.isna() | (years % 1 != 0)
    if bad.any():
        raise SchemaError(f"Non-integer year values: {sorted(series[bad].astype(str).unique().tolist())[:5]}")
    return years.astype(int)


def reshape_projections(
    raw: pd.DataFrame,
    *,
    tag_col: str = TAG_COL,
    scenarios: Sequence[str] = SCENARIO_LABELS,
    prefix: str = SCENARIO_PREFIX,
    location_order: Sequence[str] = LOCATION_ORDER,
    season_order: Sequence[str] = SEASON_ORDER,
    categories: Sequence[str] = CATEGORIES,
    excluded_year: Optional[int] = EXCLUDED_YEAR,
    tolerance: float = COERCION_TOLERANCE,
) -> pd.DataFrame:
    """
    Turn the loader's wide table into one row per
    (location, category, season, year, scenario).

    Raises:
        SchemaError: missing columns, bad file tags, unknown location/season/category.
        DataQualityError: too many non-numeric day counts.
    """
    value_cols = scenario_columns(scenarios, prefix)

    df = normalize_columns(raw)
    require_columns(df, ["year"] + list(value_cols), context="projection files")

    # --- Filename metadata ---
    df = split_tag(df, tag_col, PROJECTION_TAG_FIELDS)
    df["location"] = relevel(title_text(df["location"]), location_order, "location")
    df["season"] = relevel(title_text(df["season"]), season_order, "season")
    category = df["category"].str.lower()
    unknown = sorted(set(category.unique()) - set(categories))
    if unknown:
        raise SchemaError(f"Unknown category values {unknown}; expected one of {list(categories)}")
    df["category"] = pd.Categorical(category, categories=list(categories))

    # --- Select by name ---
    df = df[ID_COLUMNS + list(value_cols)].copy()
    df["year"] = _coerce_year(df["year"])

    if excluded_year is not None:
        n_before = len(df)
        df = df[df["year"] != excluded_year]
        logger.info(f"Dropped {n_before - len(df):,} rows for excluded year {excluded_year}")

    # --- Wide -> long ---
    long_ = df.melt(
        id_vars=ID_COLUMNS,
        value_vars=list(value_cols),
        var_name="scenario",
        value_name=VALUE_COL,
    )
    for col in ("location", "category", "season"):
        long_[col] = long_[col].astype(df[col].dtype)
    long_["scenario"] = pd.Categorical(
        long_["scenario"].map(value_cols), categories=list(scenarios), ordered=True
    )
    long_[VALUE_COL] = coerce_numeric(long_[VALUE_COL], VALUE_COL, tolerance=tolerance)

    long_ = (long_[OUTPUT_COLUMNS]
             .sort_values(["location", "category", "season", "year", "scenario"])
             .reset_index(drop=True))
    logger.info(
        f"Reshaped projections: {len(long_):,} rows | "
        f"locations: {long_['location'].nunique()} | years: "
        f"{long_['year'].min() if len(long_) else None}..{long_['year'].max() if len(long_) else None}"
    )
    return long_
