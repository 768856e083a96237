"""Column and field helpers shared by the projection and drought reshapers."""

import re
import logging
from typing import Optional, Sequence

import pandas as pd

from config import TAG_SEP, COERCION_TOLERANCE
from utils.errors import SchemaError, DataQualityError

logger = logging.getLogger(__name__)


def normalize_column_name(name) -> str:
    return re.sub(r"\s+", "_", str(name).strip().lower())


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """'Average RCP4.5 ' -> 'average_rcp4.5'."""
    return df.rename(columns=normalize_column_name)


def require_columns(df: pd.DataFrame, columns: Sequence[str], context: str = "table") -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing columns in {context}: {missing}. Available: {df.columns.tolist()}"
        )


def split_tag(
    df: pd.DataFrame,
    tag_col: str,
    fields: Sequence[str],
    sep: str = TAG_SEP,
) -> pd.DataFrame:
    """
    Split the filename tag in `tag_col` into `fields`.

    Raises:
        SchemaError: if any tag does not split into exactly len(fields) parts.
    """
    require_columns(df, [tag_col], context="tagged table")
    parts = df[tag_col].astype(str).str.split(sep, regex=False)
    bad = parts.str.len() != len(fields)
    if bad.any():
        bad_tags = sorted(df.loc[bad, tag_col].astype(str).unique().tolist())
        raise SchemaError(
            f"Expected {len(fields)} '{sep}'-separated fields {list(fields)} in file names, "
            f"got: {bad_tags[:5]}"
        )

    out = df.drop(columns=[tag_col])
    for i, field in enumerate(fields):
        out[field] = parts.str[i].str.strip()
    return out


def title_text(series: pd.Series) -> pd.Series:
    """'new-plymouth' -> 'New Plymouth'."""
    return series.astype(str).str.replace("-", " ", regex=False).str.strip().str.title()


def relevel(series: pd.Series, order: Optional[Sequence[str]], field: str) -> pd.Series:
    """
    Turn `series` into an ordered categorical.

    With `order` given, unknown values are a schema problem. Without it the
    categories are the sorted distinct values.
    """
    if order is None:
        order = sorted(series.dropna().unique().tolist())
    unknown = sorted(set(series.dropna().unique()) - set(order))
    if unknown:
        raise SchemaError(f"Unknown {field} values {unknown}; expected one of {list(order)}")
    return pd.Series(
        pd.Categorical(series, categories=list(order), ordered=True),
        index=series.index,
        name=series.name,
    )


def _present(series: pd.Series) -> pd.Series:
    return series.notna() & series.astype(str).str.strip().ne("")


def _check_failures(failed: pd.Series, present: pd.Series, field: str, tolerance: float) -> None:
    n_failed = int(failed.sum())
    if n_failed == 0:
        return
    n_present = int(present.sum())
    share = n_failed / n_present if n_present else 0.0
    examples = failed[failed].index[:5].tolist()
    if share > tolerance:
        raise DataQualityError(
            f"{n_failed:,} of {n_present:,} '{field}' values ({share:.1%}) could not be coerced "
            f"(tolerance {tolerance:.1%}); first rows: {examples}"
        )
    logger.warning(f"{n_failed:,} non-numeric '{field}' values set to missing ({share:.1%})")


def coerce_numeric(series: pd.Series, field: str, tolerance: float = COERCION_TOLERANCE) -> pd.Series:
    """
    Coerce text to float. Blank or NA cells stay missing; present tokens
    that fail to parse become NaN too, but only up to `tolerance`.
    """
    present = _present(series)
    text = series.astype(str).str.strip().where(present)
    values = pd.to_numeric(text, errors="coerce").astype(float)
    _check_failures(present & values.isna(), present, field, tolerance)
    return values


def coerce_dates(
    series: pd.Series,
    field: str,
    date_format: Optional[str] = None,
    tolerance: float = COERCION_TOLERANCE,
) -> pd.Series:
    present = _present(series)
    text = series.astype(str).str.strip().where(present)
    values = pd.to_datetime(text, format=date_format, errors="coerce")
    _check_failures(present & values.isna(), present, field, tolerance)
    return values
