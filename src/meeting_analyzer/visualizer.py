"""Visualization module for meeting analysis.

Creates:
1. Distance-over-time scatter for a user pair
2. Floor map of sighting positions
"""

from pathlib import Path
from typing import Any, Dict, Optional

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns


class MeetingVisualizer:
    """Creates charts for meeting analysis."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize visualizer with configuration.

        Args:
            config: Configuration dictionary
        """
        self.config = config

    def create_distance_plot(
        self,
        candidates: pd.DataFrame,
        output_file: Path,
        title: str = "Distance in meters between the users"
    ) -> None:
        """Plot distance to the other user's last position against time.

        Expects the sightings that passed the floor and staleness checks but
        not yet the distance cutoff, so points above the threshold line are
        shown too.

        Args:
            candidates: DataFrame with ``timestamp`` and ``distance`` columns
            output_file: Output file path
            title: Chart title
        """
        if candidates is None or candidates.empty:
            print("No data to visualize")
            return

        max_distance = self.config['thresholds']['max_distance_meters']
        close = candidates['distance'] < max_distance

        fig, ax = plt.subplots(figsize=(14, 5))

        ax.scatter(candidates.loc[~close, 'timestamp'], candidates.loc[~close, 'distance'],
                   s=12, color='steelblue', alpha=0.7, label='Apart')
        ax.scatter(candidates.loc[close, 'timestamp'], candidates.loc[close, 'distance'],
                   s=18, color='darkred', alpha=0.9, label='Close')
        ax.axhline(max_distance, color='gray', linestyle='--', linewidth=1,
                   label=f'{max_distance} m threshold')

        ax.set_title(title, fontsize=12)
        ax.set_ylabel('Distance (m)', fontsize=10)
        ax.set_xlabel('Time', fontsize=10)
        ax.set_ylim(bottom=0)
        ax.legend(loc='upper right')
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%m-%d %H:%M'))
        plt.setp(ax.xaxis.get_majorticklabels(), rotation=45)

        plt.tight_layout()
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        print(f"Distance plot saved to {output_file}")

    def create_floor_plot(
        self,
        data: pd.DataFrame,
        floor: int,
        output_file: Path,
        uids: Optional[list] = None
    ) -> None:
        """Scatter of sighting positions on one floor.

        Args:
            data: Sighting frame
            floor: Floor number to draw
            output_file: Output file path
            uids: Only draw these users, coloured per user (None draws all
                sightings in one colour)
        """
        df = data[data['floor'] == floor]
        if uids is not None:
            df = df[df['uid'].isin(uids)]
        if df.empty:
            print(f"No sightings on floor {floor}")
            return

        fig, ax = plt.subplots(figsize=(10, 8))
        sns.scatterplot(
            data=df,
            x='x',
            y='y',
            hue='uid' if uids is not None else None,
            s=8,
            alpha=0.5,
            linewidth=0,
            ax=ax,
        )
        ax.set_title(f"Sightings on floor {floor}", fontsize=12)
        ax.set_xlabel('X (m)')
        ax.set_ylabel('Y (m)')
        ax.set_aspect('equal', adjustable='datalim')

        plt.tight_layout()
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        print(f"Floor plot saved to {output_file}")
