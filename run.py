#!/usr/bin/env python3
"""Main entry point for building meeting analysis.

Usage:
    python run.py UID1 UID2 [--plot]     check whether two users have met
    python run.py --all                  check every pair of users
    python run.py ... --floor N          also map the sightings on floor N
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from meeting_analyzer import MeetingAnalyzer, MeetingVisualizer, load_config, load_sightings
from meeting_analyzer.exceptions import MeetingAnalyzerError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Find out whether two users have met in the building")
    parser.add_argument("uids", nargs="*", metavar="UID", help="Two user ids to check")
    parser.add_argument("--all", action="store_true", help="Check every pair of users in the data")
    parser.add_argument("--data", help="Sighting CSV (default: data.file from config)")
    parser.add_argument("--config", help="Config file (default: config.yaml next to this script)")
    parser.add_argument("--output", help="Output directory (default: output.directory from config)")
    parser.add_argument("--plot", action="store_true", help="Save a distance-over-time chart")
    parser.add_argument("--report", action="store_true", help="Write a text report to the output directory")
    parser.add_argument("--floor", type=int, metavar="N", help="Save a map of the sightings on floor N")
    return parser.parse_args(argv)


def main(argv=None):
    """Run meeting analysis from the command line."""
    args = parse_args(argv)
    base_path = Path(__file__).parent

    if not args.all and len(args.uids) != 2:
        print("Error: give two user ids, or --all to check every pair.")
        return 1

    # Initialize configuration
    config_path = Path(args.config) if args.config else base_path / "config.yaml"
    if args.config and not config_path.exists():
        print(f"Error: Config file not found at {config_path}")
        return 1
    config = load_config(config_path if config_path.exists() else None)

    data_path = Path(args.data) if args.data else base_path / config['data']['file']
    output_path = Path(args.output) if args.output else base_path / config['output']['directory']

    print("Building Meeting Analysis")
    print("=" * 60)
    print()

    analyzer = MeetingAnalyzer(config)
    visualizer = MeetingVisualizer(config)

    try:
        if args.all:
            data = load_sightings(data_path)
            output_path.mkdir(parents=True, exist_ok=True)
            pairs = analyzer.find_all_meetings(data)
            analyzer.report_generator.generate_batch_report(pairs, output_path / "all_meetings.csv")
            if args.floor is not None:
                visualizer.create_floor_plot(data, args.floor, output_path / f"floor_{args.floor}.png")
            return 0

        uid1, uid2 = args.uids
        data = load_sightings(data_path, uids=[uid1, uid2])
        print()
        result = analyzer.analyze(uid1, uid2, data)
        analyzer.present(result, plot_distance=args.plot, output_dir=output_path)

        if args.report:
            output_path.mkdir(parents=True, exist_ok=True)
            analyzer.report_generator.generate_report(
                result, output_path / f"meeting_{uid1}_{uid2}.txt"
            )
        if args.floor is not None:
            output_path.mkdir(parents=True, exist_ok=True)
            visualizer.create_floor_plot(
                data, args.floor, output_path / f"floor_{args.floor}_{uid1}_{uid2}.png", uids=[uid1, uid2]
            )
    except (FileNotFoundError, MeetingAnalyzerError) as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
