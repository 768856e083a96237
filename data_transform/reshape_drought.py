"""
Reshape concatenated per-district drought index files into
(district, date, indicator_type, index_value), composite index rows only.
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from config import (
    TAG_COL, DROUGHT_TAG_FIELDS, DROUGHT_COLUMNS, DROUGHT_DATE_FORMAT,
    COMPOSITE_INDEX, DISTRICT_ORDER, COERCION_TOLERANCE,
)
from data_transform.common import (
    normalize_columns, require_columns, split_tag, title_text, relevel,
    coerce_numeric, coerce_dates,
)

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["district", "date", "indicator_type", "index_value"]


def reshape_drought(
    raw: pd.DataFrame,
    *,
    tag_col: str = TAG_COL,
    indicator: str = COMPOSITE_INDEX,
    district_order: Optional[Sequence[str]] = DISTRICT_ORDER,
    date_format: Optional[str] = DROUGHT_DATE_FORMAT,
    tolerance: float = COERCION_TOLERANCE,
) -> pd.DataFrame:
    df = normalize_columns(raw)
    require_columns(df, list(DROUGHT_COLUMNS), context="drought files")
    df = df.rename(columns=DROUGHT_COLUMNS)

    df = split_tag(df, tag_col, DROUGHT_TAG_FIELDS)
    df["district"] = title_text(df["district"])

    df["indicator_type"] = df["indicator_type"].astype(str).str.strip().str.upper()
    df = df[df["indicator_type"] == indicator.upper()].copy()

    df["date"] = coerce_dates(df["date"], "date", date_format=date_format, tolerance=tolerance)
    n_undated = int(df["date"].isna().sum())
    if n_undated:
        logger.warning(f"Dropping {n_undated:,} {indicator} rows without a usable date")
        df = df[df["date"].notna()].copy()

    df["index_value"] = coerce_numeric(df["index_value"], "index_value", tolerance=tolerance)
    df["district"] = relevel(df["district"], district_order, "district")

    out = df[OUTPUT_COLUMNS].sort_values(["district", "date"]).reset_index(drop=True)
    logger.info(f"Reshaped drought index: {len(out):,} {indicator} rows | districts: {out['district'].nunique()}")
    return out
