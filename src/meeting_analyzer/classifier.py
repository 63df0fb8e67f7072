"""Proximity classification of reconstructed sightings.

A reconstructed sighting becomes a meeting candidate when both users were on
the same floor, the other user's last sighting is recent enough to be
trusted, and the two positions are close.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .exceptions import ReconstructionInvariantError

# Defaults, overridden from config
MAX_STALENESS_SECONDS = 120.0
MAX_DISTANCE_METERS = 2.0


@dataclass(slots=True)
class Classification:
    """Candidates before and after the distance cutoff."""

    staleness_candidates: pd.DataFrame  # same floor, recent enough; any distance
    candidates: pd.DataFrame  # additionally close enough


class ProximityClassifier:
    """Filters reconstructed sightings by floor, staleness and distance."""

    def __init__(
        self,
        max_staleness_seconds: float = MAX_STALENESS_SECONDS,
        max_distance_meters: float = MAX_DISTANCE_METERS,
    ):
        self.max_staleness_seconds = float(max_staleness_seconds)
        self.max_distance_meters = float(max_distance_meters)

    @staticmethod
    def annotate(records: pd.DataFrame) -> pd.DataFrame:
        """Add ``elapsed_seconds`` and ``distance`` columns.

        Raises:
            ReconstructionInvariantError: If any counterpart sighting is
                dated after the sighting it is attached to
        """
        records = records.copy()
        records['elapsed_seconds'] = (
            records['timestamp'] - records['time_other']
        ).dt.total_seconds().astype(float)
        records['distance'] = np.hypot(
            records['x'] - records['x_other'],
            records['y'] - records['y_other'],
        ).astype(float)

        negative = records[records['elapsed_seconds'] < 0]
        if not negative.empty:
            first = negative.iloc[0]
            raise ReconstructionInvariantError(
                f"{len(negative)} sightings have a counterpart from the future, "
                f"first at {first['timestamp']} "
                f"(counterpart seen {first['time_other']})"
            )

        return records

    def filter_staleness(self, records: pd.DataFrame) -> pd.DataFrame:
        """Keep same-floor records whose counterpart was seen recently."""
        mask = (
            (records['floor'] == records['floor_other'])
            & (records['elapsed_seconds'] < self.max_staleness_seconds)
        )
        return records[mask].reset_index(drop=True)

    def filter_distance(self, candidates: pd.DataFrame) -> pd.DataFrame:
        """Keep candidates closer than the distance threshold."""
        return candidates[candidates['distance'] < self.max_distance_meters].reset_index(drop=True)

    def classify(self, records: pd.DataFrame) -> Classification:
        """Run annotation and both filters over reconstructed sightings.

        Args:
            records: Output of ``LastSeenReconstructor.reconstruct``

        Returns:
            Classification holding the staleness-filtered set (for distance
            plotting) and the final candidates
        """
        annotated = self.annotate(records)
        staleness_candidates = self.filter_staleness(annotated)
        return Classification(
            staleness_candidates=staleness_candidates,
            candidates=self.filter_distance(staleness_candidates),
        )
