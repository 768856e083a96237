"""
Publish charts from the tidy tables:
- one animated polar chart (GIF) per location and category, years as frames
- one static line chart (PNG) of drought episodes for a target year
- a manifest CSV mapping every output file to the entity it shows
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd

from config import (
    CHARTS_DIR, MANIFEST_CSV, LOCATION_ORDER, CATEGORY_FILE_PREFIX, CATEGORY_TITLES,
    SCENARIO_PALETTE, DISTRICT_PALETTE, PROJECTION_YLIM, PROJECTION_TITLE, DROUGHT_TITLE,
    FIGURE_SIZE, DROUGHT_FIGURE_SIZE, FRAME_RATE, END_PAUSE_SECONDS, ANIMATION_LOOP,
    DROUGHT_THRESHOLD, CARRY_BACK_MONTHS,
)
from data_transform.episodes import select_year
from utils.errors import RenderError
from utils.io_utils import atomic_write_csv
from utils.render import StyleConfig, render, animate, save_figure

logger = logging.getLogger(__name__)

MANIFEST_COLUMNS = ["file", "entity", "category", "scenarios", "frames"]


@dataclass
class ChartRequest:
    entity: str
    output_name: str
    table: pd.DataFrame


def projection_style(category: str) -> StyleConfig:
    return StyleConfig(
        palette=SCENARIO_PALETTE,
        title_template=PROJECTION_TITLE,
        kind="polar",
        ylim=PROJECTION_YLIM.get(category),
        dimensions=FIGURE_SIZE,
    )


def drought_style() -> StyleConfig:
    return StyleConfig(
        palette=DISTRICT_PALETTE,
        title_template=DROUGHT_TITLE,
        kind="line",
        dimensions=DROUGHT_FIGURE_SIZE,
        xlabel="Episode start",
        ylabel="Episode length (days)",
    )


def output_name(category: str, location: str, location_order: Sequence[str] = LOCATION_ORDER) -> str:
    """'rain_<n>.gif' / 'hot_<n>.gif', n = 1-based position in the north-to-south order."""
    prefix = CATEGORY_FILE_PREFIX.get(category, category)
    return f"{prefix}_{list(location_order).index(location) + 1}.gif"


def plan_projection_charts(
    table: pd.DataFrame,
    category: str,
    scenarios: Optional[Sequence[str]] = None,
    locations: Optional[Sequence[str]] = None,
) -> list:
    """One request per location present after filtering, in categorical order."""
    view = table[table["category"] == category]
    if scenarios is not None:
        view = view[view["scenario"].isin(scenarios)]
    if locations is not None:
        view = view[view["location"].isin(locations)]

    loc = view["location"]
    if isinstance(loc.dtype, pd.CategoricalDtype):
        order = list(loc.cat.categories)
        seen = set(loc.unique())
        present = [c for c in order if c in seen]
    else:
        order = list(LOCATION_ORDER)
        present = sorted(loc.unique(), key=lambda v: order.index(v) if v in order else len(order))

    requests = []
    for location in present:
        sub = view[view["location"] == location].reset_index(drop=True)
        requests.append(ChartRequest(location, output_name(category, location, order), sub))
    return requests


def _projection_frames(request: ChartRequest, category: str, style: StyleConfig):
    years = sorted(request.table["year"].unique().tolist())

    def frame(i):
        year = years[i]
        return render(
            request.table[request.table["year"] == year],
            x="season", y="day_count", group="scenario", color="scenario",
            style=style,
            title_fields={
                "location": request.entity,
                "category_title": CATEGORY_TITLES.get(category, category),
                "year": year,
            },
        )

    return years, frame


def publish_projection_animations(
    table: pd.DataFrame,
    category: str,
    out_dir: str = CHARTS_DIR,
    scenarios: Optional[Sequence[str]] = None,
    locations: Optional[Sequence[str]] = None,
    style: Optional[StyleConfig] = None,
    frame_rate: float = FRAME_RATE,
    end_pause: float = END_PAUSE_SECONDS,
    loop: bool = ANIMATION_LOOP,
) -> pd.DataFrame:
    """
    Render one GIF per location and return the manifest rows.

    Every location is attempted; failures are logged with the location and
    raised together as RenderError at the end.
    """
    style = style or projection_style(category)
    requests = plan_projection_charts(table, category, scenarios=scenarios, locations=locations)
    logger.info(f"Rendering {len(requests)} {category} animations to {out_dir}")

    rows, failed = [], []
    for req in requests:
        path = os.path.join(out_dir, req.output_name)
        try:
            years, frame = _projection_frames(req, category, style)
            animate(frame, len(years), frame_rate, style.dimensions, end_pause, loop, path)
        except Exception as e:
            logger.error(f"Failed to render {category} animation for {req.entity}: {e}")
            failed.append(req.entity)
            continue
        scenario_names = [str(s) for s in req.table["scenario"].unique()]
        rows.append({
            "file": req.output_name,
            "entity": req.entity,
            "category": category,
            "scenarios": ";".join(scenario_names),
            "frames": len(years),
        })
        logger.info(f"Saved {path} ({req.entity}, {len(years)} frames)")

    manifest = pd.DataFrame(rows, columns=MANIFEST_COLUMNS)
    if failed:
        raise RenderError(f"{category} animations failed for: {failed}", entities=failed, completed=manifest)
    return manifest


def publish_drought_chart(
    episodes: pd.DataFrame,
    year: int,
    out_dir: str = CHARTS_DIR,
    districts: Optional[Sequence[str]] = None,
    style: Optional[StyleConfig] = None,
    carry_back_months: int = CARRY_BACK_MONTHS,
) -> pd.DataFrame:
    """Static chart of the episodes starting in `year` (with carry-back)."""
    style = style or drought_style()
    view = select_year(episodes, year, carry_back_months=carry_back_months)
    if districts is not None:
        view = view[view["district"].isin(districts)]

    name = f"drought_{year}.png"
    path = os.path.join(out_dir, name)
    try:
        fig = render(
            view, x="start_date", y="day_count", group="district", color="district",
            style=style, title_fields={"threshold": DROUGHT_THRESHOLD, "year": year},
        )
        save_figure(fig, path)
    except Exception as e:
        logger.error(f"Failed to render drought chart for {year}: {e}")
        raise RenderError(f"Drought chart failed for {year}: {e}", entities=[str(year)]) from e

    present = view["district"].dropna().unique()
    logger.info(f"Saved {path} ({len(view)} episodes, {len(present)} districts)")
    return pd.DataFrame([{
        "file": name,
        "entity": str(year),
        "category": "drought",
        "scenarios": "",
        "frames": 1,
    }], columns=MANIFEST_COLUMNS)


def write_manifest(parts: Sequence[pd.DataFrame], path: str = MANIFEST_CSV) -> str:
    manifest = pd.concat(list(parts), ignore_index=True) if parts else pd.DataFrame(columns=MANIFEST_COLUMNS)
    atomic_write_csv(manifest, path)
    logger.info(f"Wrote manifest with {len(manifest)} charts -> {path}")
    return path
