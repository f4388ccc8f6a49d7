"""Exception hierarchy for the attendance recognition pipeline.

Startup errors (camera, model) halt the session. Per-cycle errors
(detection, reporting) are caught where they happen and logged.
"""

from typing import Optional


class FaceAttendanceError(Exception):
    """Base class for all face attendance errors."""


class AcquisitionError(FaceAttendanceError):
    """Camera could not be opened or stopped delivering frames."""


class ModelReadinessError(FaceAttendanceError):
    """Detector or one of its models failed to load."""


class EnrollmentError(FaceAttendanceError):
    """No usable face was found in an enrollment image."""

    def __init__(self, label: str, reason: str):
        super().__init__(f"Enrollment failed for '{label}': {reason}")
        self.label = label
        self.reason = reason


class DetectionError(FaceAttendanceError):
    """Detector failed on a single frame."""


class ReportingError(FaceAttendanceError):
    """Attendance endpoint rejected an update or could not be reached."""

    def __init__(self, label: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Attendance update for '{label}' failed: {reason}")
        self.label = label
        self.reason = reason
        self.status_code = status_code
