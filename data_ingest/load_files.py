"""
Multi-file CSV loader:
- find every file matching a pattern in one directory
- parse each as text (coercion happens later, per field)
- stamp rows with the file stem, the only source of grouping metadata
- concatenate into one table
"""

import os
import glob
import logging

import pandas as pd

from config import INPUT_PATTERN, TAG_COL
from utils.errors import IngestError, SchemaError

logger = logging.getLogger(__name__)


def discover_files(directory: str, pattern: str = INPUT_PATTERN) -> list:
    if not os.path.isdir(directory):
        raise IngestError(f"Input directory not found: {directory}")
    if not os.access(directory, os.R_OK | os.X_OK):
        raise IngestError(f"Input directory is not readable: {directory}")
    files = sorted(p for p in glob.glob(os.path.join(directory, pattern)) if os.path.isfile(p))
    if not files:
        raise IngestError(f"No files matching '{pattern}' in {directory}")
    return files


def file_tag(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def read_tagged_csv(path: str, tag_col: str = TAG_COL) -> pd.DataFrame:
    """Read one CSV as strings and add the file stem as `tag_col`."""
    try:
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestError(f"Failed to parse {path}: {e}") from e
    if tag_col in df.columns:
        raise SchemaError(f"{path} already has a '{tag_col}' column")
    df[tag_col] = file_tag(path)
    return df


def load_tagged_csvs(
    directory: str,
    pattern: str = INPUT_PATTERN,
    tag_col: str = TAG_COL,
    require_uniform: bool = True,
) -> pd.DataFrame:
    """
    Load every matching file in `directory` into one table.

    Any unreadable file aborts the whole load. With `require_uniform`, every
    file must carry the same header as the first one.
    """
    paths = discover_files(directory, pattern)

    frames = []
    expected = None
    for p in paths:
        df = read_tagged_csv(p, tag_col=tag_col)
        header = [str(c).strip() for c in df.columns]
        if require_uniform:
            if expected is None:
                expected = header
            elif set(header) != set(expected):
                missing = sorted(set(expected) - set(header))
                unexpected = sorted(set(header) - set(expected))
                raise SchemaError(
                    f"Header mismatch in {p}: missing={missing} unexpected={unexpected}"
                )
        frames.append(df)

    out = pd.concat(frames, ignore_index=True)
    logger.info(f"Loaded {len(out):,} rows from {len(paths)} files in {directory}")
    return out
