# config.py
"""
Central configuration for the climate extremes pipeline.
Edit this file to change paths, domain constants, chart styling, etc.
"""
import os

# Project root directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# --- Input paths ---
RAW_DATA_DIR = os.path.join(BASE_DIR, "data", "raw")
PROJECTIONS_DIR = os.path.join(RAW_DATA_DIR, "projections")  # <location>_<category>_<season>.csv
DROUGHT_DIR = os.path.join(RAW_DATA_DIR, "drought")          # <district>.csv
INPUT_PATTERN = "*.csv"
TAG_COL = "source_tag"
TAG_SEP = "_"

# --- Output paths ---
OUTPUTS_DIR = os.path.join(BASE_DIR, "outputs")
CHARTS_DIR = os.path.join(OUTPUTS_DIR, "charts")
PROJECTIONS_TIDY_PARQUET = os.path.join(OUTPUTS_DIR, "projections_tidy.parquet")
PROJECTIONS_TIDY_CSV = os.path.join(OUTPUTS_DIR, "projections_tidy.csv")
EPISODES_CSV = os.path.join(OUTPUTS_DIR, "drought_episodes.csv")
EPISODE_SUMMARY_CSV = os.path.join(OUTPUTS_DIR, "drought_episode_summary.csv")
MANIFEST_CSV = os.path.join(OUTPUTS_DIR, "chart_manifest.csv")
SUCCESS_MARK = os.path.join(OUTPUTS_DIR, "_SUCCESS")  # tiny marker file

# --- Climate projections ---
# north to south, used for grouping/sort order and output file numbering
LOCATION_ORDER = [
    "Auckland", "Tauranga", "Hamilton", "New Plymouth", "Napier",
    "Nelson", "Wellington", "Christchurch", "Dunedin", "Invercargill",
]
SEASON_ORDER = ["Summer", "Autumn", "Winter", "Spring"]
CATEGORIES = ["wet-day", "hot-day"]
PROJECTION_TAG_FIELDS = ["location", "category", "season"]

SCENARIO_LABELS = ["RCP2.6", "RCP4.5", "RCP6.0", "RCP8.5"]
SCENARIO_PREFIX = "average_"  # multi-model mean columns, e.g. "Average RCP4.5"

# Summer 1971 spans Dec 1970, which the upstream collection did not cover
EXCLUDED_YEAR = 1971

# --- Drought index ---
DROUGHT_TAG_FIELDS = ["district"]
DROUGHT_COLUMNS = {"date": "date", "indicator": "indicator_type", "value": "index_value"}
DROUGHT_DATE_FORMAT = "%Y-%m-%d"
COMPOSITE_INDEX = "NZDI"
DROUGHT_THRESHOLD = 1.5      # NZDI >= 1.5 is drought
CARRY_BACK_MONTHS = 2        # Nov/Dec starts count towards the following year
DISTRICT_ORDER = None        # None -> alphabetical

# Share of present-but-non-numeric tokens tolerated before failing the run
COERCION_TOLERANCE = 0.05

# --- Parquet I/O ---
PARQUET_ENGINE = "pyarrow"
PARQUET_COMPRESSION = "snappy"  # or "zstd"

# --- Charts ---
CATEGORY_FILE_PREFIX = {"wet-day": "rain", "hot-day": "hot"}
CATEGORY_TITLES = {"wet-day": "Wet days", "hot-day": "Hot days"}

SCENARIO_PALETTE = {
    "RCP2.6": "#2c7bb6",
    "RCP4.5": "#abd9e9",
    "RCP6.0": "#fdae61",
    "RCP8.5": "#d7191c",
}
DISTRICT_PALETTE = [
    "#8c510a", "#bf812d", "#dfc27d", "#80cdc1", "#35978f",
    "#01665e", "#c51b7d", "#de77ae", "#7fbc41", "#4d9221",
]

PROJECTION_YLIM = {"wet-day": (0, 40), "hot-day": (0, 60)}
PROJECTION_TITLE = "{location}: {category_title} per season, {year}"
DROUGHT_TITLE = "Drought episodes (NZDI >= {threshold}), {year}"

FONT_FAMILY = "DejaVu Sans"
FIGURE_SIZE = (6.0, 6.0)     # inches
DROUGHT_FIGURE_SIZE = (10.0, 5.0)
FIGURE_DPI = 100

# --- Animation ---
FRAME_RATE = 4               # frames per second
END_PAUSE_SECONDS = 3.0      # hold on the last year
ANIMATION_LOOP = True

# --- Default run selection ---
DROUGHT_YEAR = 2020
