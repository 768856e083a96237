import os
import shutil

import pandas as pd

from config import PARQUET_ENGINE, PARQUET_COMPRESSION


def ensure_dir(path):
    directory = path if os.path.splitext(path)[1] == "" else os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def atomic_write_csv(df: pd.DataFrame, dst_path: str) -> str:
    ensure_dir(dst_path)
    tmp_path = f"{dst_path}.tmp"
    df.to_csv(tmp_path, index=False, date_format="%Y-%m-%d")
    os.replace(tmp_path, dst_path)
    return dst_path


def atomic_write_parquet(df: pd.DataFrame, dst_path: str) -> str:
    ensure_dir(dst_path)
    tmp_path = f"{dst_path}.tmp"
    df.to_parquet(tmp_path, engine=PARQUET_ENGINE, compression=PARQUET_COMPRESSION, index=False)
    os.replace(tmp_path, dst_path)
    return dst_path


def write_success_marker(path: str) -> None:
    ensure_dir(path)
    # Remove if it's a directory (from previous runs)
    if os.path.isdir(path):
        shutil.rmtree(path)
    with open(path, "w") as f:
        f.write("ok\n")
