"""Sighting log loading.

Reads the building position log (``timestamp,x,y,floor,uid``) into a typed
DataFrame. Timestamps are parsed once here, with sub-second precision, so
every later stage compares like with like.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from .exceptions import SightingDataError

SIGHTING_COLUMNS = ['timestamp', 'x', 'y', 'floor', 'uid']

# Column types as stored in the CSV; timestamp is parsed separately
CSV_DTYPES = {'timestamp': str, 'x': float, 'y': float, 'floor': float, 'uid': str}

CHUNK_SIZE = 500_000


def prepare_sightings(df: pd.DataFrame) -> pd.DataFrame:
    """Validate and normalise an in-memory sighting frame.

    Adds a ``row`` column holding the original record order (kept if
    already present) which is used to break timestamp ties.

    Args:
        df: Frame with at least the sighting columns

    Returns:
        New DataFrame with typed columns

    Raises:
        SightingDataError: If columns are missing or values cannot be typed
    """
    missing = [col for col in SIGHTING_COLUMNS if col not in df.columns]
    if missing:
        raise SightingDataError(f"Sighting data is missing columns: {', '.join(missing)}")

    df = df.copy()
    if 'row' not in df.columns:
        df['row'] = np.arange(len(df))

    # A sighting without a user cannot belong to anyone
    no_uid = df['uid'].isna()
    if no_uid.any():
        print(f"  Skipping {int(no_uid.sum())} sightings without a user id")
        df = df[~no_uid]

    try:
        if not pd.api.types.is_datetime64_any_dtype(df['timestamp']):
            df['timestamp'] = pd.to_datetime(df['timestamp'], format='ISO8601')
        df['x'] = df['x'].astype(float)
        df['y'] = df['y'].astype(float)
        df['floor'] = df['floor'].astype('int64')
    except (ValueError, TypeError) as e:
        raise SightingDataError(f"Could not parse sighting data: {e}") from e

    df['uid'] = df['uid'].astype(str)
    return df.reset_index(drop=True)


def load_sightings(
    file_path: Union[str, Path],
    uids: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """Load the sighting log from CSV.

    Args:
        file_path: Path to CSV file with header ``timestamp,x,y,floor,uid``
        uids: Only keep sightings of these users (None keeps everything)

    Returns:
        Typed DataFrame of sightings in file order

    Raises:
        FileNotFoundError: If the file does not exist
        SightingDataError: If the file is malformed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Sighting file not found: {file_path}")

    print(f"Loading {file_path.name}...")

    try:
        if uids is None:
            df = pd.read_csv(file_path, dtype=CSV_DTYPES, skipinitialspace=True)
            df['row'] = np.arange(len(df))
        else:
            wanted = set(str(uid) for uid in uids)
            parts = []
            # Chunk index is continuous across the file, so it is the row number
            for chunk in pd.read_csv(file_path, dtype=CSV_DTYPES, skipinitialspace=True,
                                     chunksize=CHUNK_SIZE):
                chunk['row'] = chunk.index
                parts.append(chunk[chunk['uid'].isin(wanted)])
            df = pd.concat(parts) if parts else pd.DataFrame(columns=SIGHTING_COLUMNS + ['row'])
    except ValueError as e:
        raise SightingDataError(f"Could not read {file_path.name}: {e}") from e

    df = prepare_sightings(df)
    print(f"  Loaded {len(df)} sightings for {df['uid'].nunique()} users")
    return df
