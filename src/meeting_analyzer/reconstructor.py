"""Last-seen reconstruction for a pair of users.

Each user's position is only known at their own sightings. Walking the
merged, time-sorted sightings of both users, every sighting is tagged with
the other user's most recent floor, position and time, which is what the
proximity checks compare against.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd

from .exceptions import InvalidUserPairError, UserNotFoundError


@dataclass(slots=True)
class LastSeen:
    """The most recent known state of one user."""

    floor: int
    x: float
    y: float
    timestamp: pd.Timestamp


def _is_missing(uid) -> bool:
    if uid is None:
        return True
    if isinstance(uid, str):
        return uid.strip() == ''
    return bool(pd.isna(uid))


def check_users(data: pd.DataFrame, uid1, uid2) -> None:
    """Make sure two distinct users are given and both have sightings.

    Raises:
        UserNotFoundError: If either id is missing or absent from ``data``
        InvalidUserPairError: If both ids are the same user
    """
    for uid in (uid1, uid2):
        if _is_missing(uid):
            raise UserNotFoundError("User id is missing", uid=None)
        if not (data['uid'] == uid).any():
            raise UserNotFoundError(f"No sightings found for user {uid}", uid=uid)
    if uid1 == uid2:
        raise InvalidUserPairError(f"Two distinct users are required, got {uid1} twice", uid=uid1)


class LastSeenReconstructor:
    """Attaches the counterpart's last known state to each sighting."""

    def reconstruct(self, data: pd.DataFrame, uid1: str, uid2: str) -> pd.DataFrame:
        """Reconstruct counterpart state for the sightings of two users.

        Sightings are merged and stably sorted by time, ties keeping the
        original record order. Sightings before the other user's first
        sighting have no counterpart and are dropped.

        Args:
            data: Sighting frame (see ``loader.prepare_sightings``)
            uid1: First user id
            uid2: Second user id

        Returns:
            DataFrame of the pair's sightings with ``floor_other``,
            ``x_other``, ``y_other`` and ``time_other`` columns, in time order

        Raises:
            UserNotFoundError: If either user has no sightings
            InvalidUserPairError: If both ids are the same user
        """
        check_users(data, uid1, uid2)

        df = data[data['uid'].isin([uid1, uid2])]
        sort_cols = ['timestamp', 'row'] if 'row' in df.columns else ['timestamp']
        df = df.sort_values(sort_cols, kind='mergesort').reset_index(drop=True)

        slots: Dict[str, Optional[LastSeen]] = {uid1: None, uid2: None}
        other = {uid1: uid2, uid2: uid1}

        keep: List[int] = []
        floors: List[int] = []
        xs: List[float] = []
        ys: List[float] = []
        times: List[pd.Timestamp] = []

        for pos, rec in enumerate(df.itertuples(index=False)):
            counterpart = slots[other[rec.uid]]
            if counterpart is not None:
                keep.append(pos)
                floors.append(counterpart.floor)
                xs.append(counterpart.x)
                ys.append(counterpart.y)
                times.append(counterpart.timestamp)
            slots[rec.uid] = LastSeen(rec.floor, rec.x, rec.y, rec.timestamp)

        result = df.iloc[keep].reset_index(drop=True)
        result['floor_other'] = pd.Series(floors, dtype='int64')
        result['x_other'] = pd.Series(xs, dtype=float)
        result['y_other'] = pd.Series(ys, dtype=float)
        result['time_other'] = pd.Series(times, dtype=df['timestamp'].dtype)
        return result
