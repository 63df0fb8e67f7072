"""Building Meeting Analysis - Source Package."""

__version__ = "2.0.0"

from .analyzer import Meeting, MeetingAnalyzer, MeetingResult, find_meetings, resolve
from .classifier import ProximityClassifier
from .config import load_config
from .loader import load_sightings, prepare_sightings
from .reconstructor import LastSeenReconstructor
from .report import MeetingReportGenerator
from .visualizer import MeetingVisualizer

__all__ = [
    "Meeting",
    "MeetingAnalyzer",
    "MeetingResult",
    "find_meetings",
    "resolve",
    "ProximityClassifier",
    "load_config",
    "load_sightings",
    "prepare_sightings",
    "LastSeenReconstructor",
    "MeetingReportGenerator",
    "MeetingVisualizer",
]
