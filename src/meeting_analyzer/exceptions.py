"""Custom exception classes for the meeting analyzer."""

from typing import Optional


class MeetingAnalyzerError(Exception):
    """Base exception for all meeting analyzer errors."""

    pass


class SightingDataError(MeetingAnalyzerError):
    """Raised when a sighting log is missing required columns or is malformed."""

    pass


class UserNotFoundError(MeetingAnalyzerError):
    """Raised when a requested user has no sightings in the data-set."""

    def __init__(self, message: str, uid: Optional[str] = None):
        self.uid = uid
        super().__init__(message)


class ReconstructionInvariantError(MeetingAnalyzerError):
    """Raised when a counterpart position is dated after the sighting it is attached to.

    This means the merged sighting stream was not in chronological order
    and the result cannot be trusted.
    """

    pass


class InvalidUserPairError(MeetingAnalyzerError):
    """Raised when both requested user ids are the same user."""

    def __init__(self, message: str, uid: Optional[str] = None):
        self.uid = uid
        super().__init__(message)
