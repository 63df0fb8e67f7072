"""Configuration loading for the meeting analyzer.

Settings live in a YAML file. Any key missing from the file falls back to
the defaults below.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'file': 'reduced.csv',
    },
    'thresholds': {
        # Seconds the counterpart's last sighting still counts as reliable
        'max_staleness_seconds': 120.0,
        # Metres between the users to count as a meeting
        'max_distance_meters': 2.0,
    },
    'output': {
        'directory': 'output',
    },
    'batch': {
        'workers': 1,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load configuration from a YAML file merged over the defaults.

    Args:
        config_path: Path to YAML configuration file, or None for defaults only

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If ``config_path`` is given but does not exist
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    return _merge(DEFAULT_CONFIG, loaded)
