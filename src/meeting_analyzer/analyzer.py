"""Main analysis engine for meeting detection.

Answers whether two users have met in the building:
- Subsets the sighting log to the two users
- Reconstructs each user's view of the other's last known position
- Classifies sightings by floor, staleness and distance
- Picks the earliest qualifying sighting as the first meeting
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from .classifier import ProximityClassifier
from .config import load_config
from .exceptions import InvalidUserPairError, UserNotFoundError
from .reconstructor import LastSeenReconstructor, check_users
from .report import MeetingReportGenerator
from .visualizer import MeetingVisualizer

STATUS_MEETING = 'meeting'
STATUS_NO_MEETING = 'no_meeting'
STATUS_USER_NOT_FOUND = 'user_not_found'
STATUS_SAME_USER = 'same_user'


@dataclass(slots=True)
class Meeting:
    """The first sighting at which the two users were close."""

    timestamp: pd.Timestamp
    uid: str
    floor: int
    x: float
    y: float
    distance: float
    elapsed_seconds: float
    confidence: int  # number of sightings with the users close to each other


@dataclass
class MeetingResult:
    """Outcome of one meeting query."""

    status: str
    uid1: Any
    uid2: Any
    meeting: Optional[Meeting] = None
    candidates: Optional[pd.DataFrame] = None
    staleness_candidates: Optional[pd.DataFrame] = None
    message: str = ''

    @property
    def met(self) -> bool:
        return self.status == STATUS_MEETING

    @property
    def found(self) -> bool:
        return self.status in (STATUS_MEETING, STATUS_NO_MEETING)

    @property
    def same_user(self) -> bool:
        return self.status == STATUS_SAME_USER


def resolve(candidates: pd.DataFrame) -> Optional[Meeting]:
    """Pick the earliest candidate as the meeting, or None if there are none."""
    if candidates is None or candidates.empty:
        return None

    first = candidates.sort_values('timestamp', kind='mergesort').iloc[0]
    return Meeting(
        timestamp=first['timestamp'],
        uid=first['uid'],
        floor=int(first['floor']),
        x=float(first['x']),
        y=float(first['y']),
        distance=float(first['distance']),
        elapsed_seconds=float(first['elapsed_seconds']),
        confidence=len(candidates),
    )


def _pair_worker(args: Tuple[Dict[str, Any], pd.DataFrame, str, str]) -> Tuple[str, str, bool]:
    """Multi-process worker evaluating a single user pair."""
    config, pair_data, uid1, uid2 = args
    analyzer = MeetingAnalyzer(config)
    return uid1, uid2, analyzer.analyze(uid1, uid2, pair_data).met


class MeetingAnalyzer:
    """Finds meetings between pairs of users from building sightings."""

    def __init__(self, config: Optional[Union[Dict[str, Any], str, Path]] = None):
        """Initialize analyzer with configuration.

        Args:
            config: Configuration dictionary, path to YAML configuration
                file, or None for the defaults
        """
        if config is None or isinstance(config, (str, Path)):
            config = load_config(config)
        self.config = config

        thresh_cfg = self.config['thresholds']
        self.reconstructor = LastSeenReconstructor()
        self.classifier = ProximityClassifier(
            max_staleness_seconds=thresh_cfg['max_staleness_seconds'],
            max_distance_meters=thresh_cfg['max_distance_meters'],
        )
        self.report_generator = MeetingReportGenerator(self.config)

    def analyze(self, uid1, uid2, data: pd.DataFrame) -> MeetingResult:
        """Run the full pipeline for two users.

        Args:
            uid1: First user id
            uid2: Second user id
            data: Sighting frame (see ``loader.prepare_sightings``)

        Returns:
            MeetingResult; a missing user gives status ``user_not_found``
            and the same id twice gives ``same_user``

        Raises:
            ReconstructionInvariantError: If reconstruction produced a
                counterpart from the future
        """
        try:
            check_users(data, uid1, uid2)
        except UserNotFoundError as e:
            return MeetingResult(status=STATUS_USER_NOT_FOUND, uid1=uid1, uid2=uid2, message=str(e))
        except InvalidUserPairError as e:
            return MeetingResult(status=STATUS_SAME_USER, uid1=uid1, uid2=uid2, message=str(e))

        records = self.reconstructor.reconstruct(data, uid1, uid2)
        classification = self.classifier.classify(records)
        meeting = resolve(classification.candidates)

        return MeetingResult(
            status=STATUS_MEETING if meeting is not None else STATUS_NO_MEETING,
            uid1=uid1,
            uid2=uid2,
            meeting=meeting,
            candidates=classification.candidates,
            staleness_candidates=classification.staleness_candidates,
        )

    def find_meetings(
        self,
        uid1,
        uid2,
        data: pd.DataFrame,
        plot_distance: bool = False,
        return_met: bool = False,
        output_dir: Optional[Union[str, Path]] = None
    ) -> Union[str, bool, None]:
        """Find whether, and when first, two users have met.

        Prints the report text for the query.

        Args:
            uid1: First user id
            uid2: Second user id
            data: Sighting frame
            plot_distance: Save a distance-over-time chart of every sighting
                that passed the floor and staleness checks
            return_met: Return a boolean instead of the report text
            output_dir: Where the distance chart goes (config default if None)

        Returns:
            Report text; or with ``return_met`` True/False, and None when a
            user was not found or both ids are the same
        """
        result = self.analyze(uid1, uid2, data)
        text = self.present(result, plot_distance=plot_distance, output_dir=output_dir)

        if return_met:
            return result.met if result.found else None
        return text

    def present(
        self,
        result: MeetingResult,
        plot_distance: bool = False,
        output_dir: Optional[Union[str, Path]] = None
    ) -> str:
        """Print the summary of an analyzed pair, optionally charting distance.

        Returns:
            The printed summary text
        """
        if plot_distance and result.found:
            output_dir = Path(output_dir or self.config['output']['directory'])
            output_dir.mkdir(parents=True, exist_ok=True)
            visualizer = MeetingVisualizer(self.config)
            visualizer.create_distance_plot(
                result.staleness_candidates,
                output_dir / f"distance_{result.uid1}_{result.uid2}.png",
                title=f"Distance in meters between {result.uid1} and {result.uid2}"
            )

        text = self.report_generator.format_result(result)
        print(text)
        return text

    def find_all_meetings(self, data: pd.DataFrame, workers: Optional[int] = None) -> pd.DataFrame:
        """Check every pair of distinct users in the data-set.

        Args:
            data: Sighting frame with all users
            workers: Worker processes (config default if None; 1 = sequential)

        Returns:
            DataFrame with columns ``uid1``, ``uid2``, ``met``
        """
        if workers is None:
            workers = self.config['batch']['workers']

        users = sorted(data['uid'].unique())
        pairs = list(combinations(users, 2))
        print(f"Checking {len(pairs)} user pairs ({len(users)} users)...")

        # Each pair only needs its own two users' sightings
        groups = {uid: group for uid, group in data.groupby('uid', sort=False)}

        rows: List[Tuple[str, str, bool]] = []
        if workers > 1 and len(pairs) > 1:
            tasks = [
                (self.config, pd.concat([groups[uid1], groups[uid2]]), uid1, uid2)
                for uid1, uid2 in pairs
            ]
            with ProcessPoolExecutor(max_workers=min(workers, len(tasks))) as executor:
                rows = list(executor.map(_pair_worker, tasks))
        else:
            for i, (uid1, uid2) in enumerate(pairs, start=1):
                pair_data = pd.concat([groups[uid1], groups[uid2]])
                rows.append((uid1, uid2, self.analyze(uid1, uid2, pair_data).met))
                if i % 1000 == 0:
                    print(f"  {i}/{len(pairs)} pairs checked")

        result = pd.DataFrame(rows, columns=['uid1', 'uid2', 'met'])
        print(f"  Found {int(result['met'].sum())} pairs that have likely met")
        return result


def find_meetings(
    uid1,
    uid2,
    data: pd.DataFrame,
    plot_distance: bool = False,
    return_met: bool = False,
    config: Optional[Union[Dict[str, Any], str, Path]] = None
) -> Union[str, bool, None]:
    """Convenience wrapper around ``MeetingAnalyzer.find_meetings``."""
    return MeetingAnalyzer(config).find_meetings(
        uid1, uid2, data, plot_distance=plot_distance, return_met=return_met
    )
