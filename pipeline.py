#!/usr/bin/env python3
"""
Main pipeline orchestrator for the climate extremes pipeline.
Runs the projection and drought pipelines in sequence.
"""

import sys
import os
import logging
from datetime import datetime

# Add project root to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from config import (
    PROJECTIONS_DIR, DROUGHT_DIR, OUTPUTS_DIR, CHARTS_DIR,
    PROJECTIONS_TIDY_PARQUET, PROJECTIONS_TIDY_CSV, EPISODES_CSV, EPISODE_SUMMARY_CSV,
    MANIFEST_CSV, SUCCESS_MARK, CATEGORIES, DROUGHT_YEAR,
)
from utils.errors import RenderError

logger = logging.getLogger(__name__)


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('pipeline.log'),
            logging.StreamHandler()
        ]
    )


def setup_directories():
    """Create all output directories."""
    for directory in [OUTPUTS_DIR, CHARTS_DIR]:
        os.makedirs(directory, exist_ok=True)
        logger.info(f"Ensured directory exists: {directory}")


def run_projections(source_dir=PROJECTIONS_DIR):
    """Load, reshape and aggregate the climate projection files."""
    logger.info("Starting projection pipeline...")

    from data_ingest.load_files import load_tagged_csvs
    from data_transform.reshape_projections import reshape_projections
    from data_transform.aggregate import aggregate_projections
    from utils.io_utils import atomic_write_csv, atomic_write_parquet

    raw = load_tagged_csvs(source_dir)
    tidy = reshape_projections(raw)
    table = aggregate_projections(tidy)

    atomic_write_parquet(table, PROJECTIONS_TIDY_PARQUET)
    atomic_write_csv(table, PROJECTIONS_TIDY_CSV)
    logger.info(f"Wrote {len(table):,} projection rows -> {PROJECTIONS_TIDY_PARQUET}")
    return table


def run_drought(source_dir=DROUGHT_DIR):
    """Load and reshape the drought index files, then segment episodes."""
    logger.info("Starting drought pipeline...")

    from data_ingest.load_files import load_tagged_csvs
    from data_transform.reshape_drought import reshape_drought
    from data_transform.episodes import segment_episodes
    from data_transform.aggregate import summarise_episodes
    from utils.io_utils import atomic_write_csv

    raw = load_tagged_csvs(source_dir)
    observations = reshape_drought(raw)
    episodes = segment_episodes(observations)
    summary = summarise_episodes(episodes)

    atomic_write_csv(episodes, EPISODES_CSV)
    atomic_write_csv(summary, EPISODE_SUMMARY_CSV)
    logger.info(f"Wrote {len(episodes):,} episodes for {len(summary)} districts -> {EPISODES_CSV}")
    return episodes


def generate_outputs(projections, episodes, drought_year=DROUGHT_YEAR):
    """Render every chart, write the manifest, and report failed entities together."""
    logger.info("Generating charts...")

    from publish_charts import publish_projection_animations, publish_drought_chart, write_manifest

    parts, failures = [], []
    for category in CATEGORIES:
        try:
            parts.append(publish_projection_animations(projections, category))
        except RenderError as e:
            if e.completed is not None:
                parts.append(e.completed)
            failures.append(e)
    try:
        parts.append(publish_drought_chart(episodes, drought_year))
    except RenderError as e:
        failures.append(e)

    write_manifest(parts, MANIFEST_CSV)

    if failures:
        entities = [entity for e in failures for entity in e.entities]
        raise RenderError(f"{len(entities)} charts failed: {entities}", entities=entities)


def main():
    """Main pipeline execution."""
    setup_logging()
    start_time = datetime.now()
    logger.info(f"Starting climate extremes pipeline at {start_time}")

    try:
        setup_directories()

        projections = run_projections()
        episodes = run_drought()
        generate_outputs(projections, episodes)

        from utils.io_utils import write_success_marker
        write_success_marker(SUCCESS_MARK)

        end_time = datetime.now()
        duration = end_time - start_time
        logger.info(f"Pipeline completed successfully in {duration}")

    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
