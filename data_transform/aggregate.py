import logging

import pandas as pd

logger = logging.getLogger(__name__)

PROJECTION_KEYS = ["year", "location", "category", "season", "scenario"]


def aggregate_projections(table: pd.DataFrame, value_col: str = "day_count") -> pd.DataFrame:
    """
    One mean `value_col` per (year, location, category, season, scenario).

    NaNs are skipped; a group with only NaNs stays NaN. Applying this to its
    own output returns the same table.
    """
    out = (table.groupby(PROJECTION_KEYS, observed=True, sort=True)[value_col]
           .mean()
           .reset_index())
    out[value_col] = out[value_col].astype(float)
    n_dupes = len(table) - len(out)
    if n_dupes:
        logger.info(f"Averaged {n_dupes:,} duplicate rows into {len(out):,} keys")
    columns = [c for c in table.columns if c in PROJECTION_KEYS + [value_col]]
    return out[columns]


def summarise_episodes(episodes: pd.DataFrame) -> pd.DataFrame:
    """Per district: episode count, shortest/longest episode, first start, last end."""
    return (episodes.groupby("district", observed=True, sort=True)
            .agg(episodes=("episode_id", "count"),
                 shortest=("day_count", "min"),
                 longest=("day_count", "max"),
                 first_start=("start_date", "min"),
                 last_end=("end_date", "max"))
            .reset_index())
