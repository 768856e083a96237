"""
Drought episode segmentation.

An episode is a maximal run of consecutive calendar days on which a
district's composite index is at or above the drought threshold. Ids are
assigned in one pass over the date-sorted qualifying days of each district:
a new id starts at the first day, and whenever the gap to the previous
qualifying day is anything other than exactly one day.
"""

import logging

import pandas as pd

from config import DROUGHT_THRESHOLD, CARRY_BACK_MONTHS

logger = logging.getLogger(__name__)

EPISODE_COLUMNS = ["district", "episode_id", "day_count", "start_date", "end_date"]
ONE_DAY = pd.Timedelta(days=1)


def qualifying_days(observations: pd.DataFrame, threshold: float = DROUGHT_THRESHOLD) -> pd.DataFrame:
    """Days with index >= threshold, one row per (district, date), sorted."""
    days = observations[observations["index_value"] >= threshold]
    days = days.drop_duplicates(subset=["district", "date"], keep="first")
    return days.sort_values(["district", "date"]).reset_index(drop=True)


def assign_episode_ids(days: pd.DataFrame) -> pd.DataFrame:
    """Add `episode_id` (1, 2, ... per district) to date-sorted qualifying days."""
    out = days.copy()
    gap = out.groupby("district", observed=True, sort=False)["date"].diff()
    starts_episode = gap.ne(ONE_DAY)  # NaT on each district's first day -> True
    out["episode_id"] = (
        starts_episode.groupby(out["district"], observed=True, sort=False).cumsum().astype(int)
    )
    return out


def _empty_episodes(district_dtype) -> pd.DataFrame:
    return pd.DataFrame({
        "district": pd.Series([], dtype=district_dtype),
        "episode_id": pd.Series([], dtype=int),
        "day_count": pd.Series([], dtype=int),
        "start_date": pd.Series([], dtype="datetime64[ns]"),
        "end_date": pd.Series([], dtype="datetime64[ns]"),
    })


def segment_episodes(observations: pd.DataFrame, threshold: float = DROUGHT_THRESHOLD) -> pd.DataFrame:
    days = qualifying_days(observations, threshold)
    if days.empty:
        logger.info(f"No days at or above {threshold}; no drought episodes")
        return _empty_episodes(observations["district"].dtype)

    days = assign_episode_ids(days)
    episodes = (days.groupby(["district", "episode_id"], observed=True, sort=True)
                .agg(day_count=("date", "size"),
                     start_date=("date", "min"),
                     end_date=("date", "max"))
                .reset_index())
    episodes["day_count"] = episodes["day_count"].astype(int)
    logger.info(f"Segmented {len(days):,} drought days into {len(episodes):,} episodes")
    return episodes[EPISODE_COLUMNS]


def select_window(
    episodes: pd.DataFrame,
    start,
    end,
    carry_back_months: int = CARRY_BACK_MONTHS,
) -> pd.DataFrame:
    """
    Episodes starting in [start - carry_back_months, end].

    Drought seasons straddle New Year, so episodes that begin in the last
    `carry_back_months` months before the window are kept with it.
    """
    start = pd.Timestamp(start) - pd.DateOffset(months=carry_back_months)
    end = pd.Timestamp(end)
    mask = (episodes["start_date"] >= start) & (episodes["start_date"] <= end)
    return episodes[mask].reset_index(drop=True)


def select_year(episodes: pd.DataFrame, year: int, carry_back_months: int = CARRY_BACK_MONTHS) -> pd.DataFrame:
    return select_window(
        episodes,
        pd.Timestamp(year=year, month=1, day=1),
        pd.Timestamp(year=year, month=12, day=31),
        carry_back_months=carry_back_months,
    )
