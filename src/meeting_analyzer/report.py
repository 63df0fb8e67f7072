"""Report generation module.

Turns meeting query results into text:
- One-paragraph console summary per query
- Text report file with the thresholds used
- CSV of the all-pairs sweep
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

NOT_FOUND_TEXT = "Data for at least one of the given users was not found in the data-set."
NO_MEETING_TEXT = "Based on our data the two users have likely not met."
SAME_USER_TEXT = "The two given user ids are the same user; two different users are needed."


class MeetingReportGenerator:
    """Generates text reports for meeting queries."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize report generator.

        Args:
            config: Configuration dictionary
        """
        self.config = config

    def format_result(self, result) -> str:
        """Format a MeetingResult as the console summary.

        Distance and elapsed seconds are rounded to 3 decimals; the number
        of close sightings is reported as the confidence measure.
        """
        if result.same_user:
            return SAME_USER_TEXT
        if not result.found:
            return NOT_FOUND_TEXT
        if result.meeting is None:
            return NO_MEETING_TEXT

        meeting = result.meeting
        lines = [
            f"Based on the data the two users can have met the first time at {meeting.timestamp}",
            f"Location: Floor: {meeting.floor}  X: {meeting.x}  Y: {meeting.y}",
            f"Distance between the users: {round(meeting.distance, 3)}  "
            f"Seconds between sightings: {round(meeting.elapsed_seconds, 3)}",
            f"In total there are {meeting.confidence} timestamps with the users close to each other.",
        ]
        return '\n'.join(lines)

    def generate_report(self, result, output_file: Path) -> str:
        """Write a text report for one meeting query.

        Args:
            result: MeetingResult from ``MeetingAnalyzer.analyze``
            output_file: Output file path

        Returns:
            Report text
        """
        thresholds = self.config['thresholds']
        report: List[str] = []

        report.append("=" * 80)
        report.append("BUILDING MEETING ANALYSIS")
        report.append("=" * 80)
        report.append(f"Report Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        report.append(f"Users: {result.uid1} and {result.uid2}")
        report.append("")

        report.append("PARAMETERS")
        report.append("-" * 80)
        report.append(f"  - Max time since other user was seen: {thresholds['max_staleness_seconds']} seconds")
        report.append(f"  - Max distance: {thresholds['max_distance_meters']} meters")
        report.append("  - Both users must be on the same floor")
        report.append("")

        report.append("RESULT")
        report.append("-" * 80)
        report.append(self.format_result(result))
        report.append("")

        if result.found and result.staleness_candidates is not None:
            report.append("SIGHTINGS")
            report.append("-" * 80)
            report.append(f"  Same floor and recent: {len(result.staleness_candidates)}")
            report.append(f"  Also within distance: {len(result.candidates)}")
            report.append("")

        report.append("=" * 80)

        report_text = '\n'.join(report)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(report_text)

        print(f"\nReport saved to {output_file}")
        return report_text

    def generate_batch_report(self, pairs: pd.DataFrame, output_file: Path) -> None:
        """Write the all-pairs sweep to CSV, met pairs first."""
        pairs = pairs.sort_values(['met', 'uid1', 'uid2'], ascending=[False, True, True])
        pairs.to_csv(output_file, index=False)
        print(f"Pair results saved to {output_file}")
