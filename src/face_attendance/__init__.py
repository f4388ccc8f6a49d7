"""Face Attendance.

Recognizes enrolled people in a live camera feed and reports each one to
an attendance API once per session.

Quick Start:
    # Enroll images from data/labels/{label}.jpg and run
    face-attendance run

    # As library
    from face_attendance import LabelRegistry, RecognitionEngine, SessionDedupState

    engine = RecognitionEngine(registry)
    report = engine.process(faces, SessionDedupState())
"""

from .errors import (
    FaceAttendanceError,
    AcquisitionError,
    ModelReadinessError,
    EnrollmentError,
    DetectionError,
    ReportingError,
)
from .detection import BaseFaceDetector, DetectedFace
from .recognition import (
    AttributeAggregator,
    CycleReport,
    LabelRegistry,
    MatchStatus,
    RecognitionEngine,
    RecognitionMatcher,
    RecognitionResult,
    ReferenceIdentity,
    SessionDedupState,
    SessionDedupTracker,
    euclidean_distance,
)
from .scheduler import CycleScheduler
from .session import RecognitionSession

__version__ = "0.1.0"

__all__ = [
    "FaceAttendanceError",
    "AcquisitionError",
    "ModelReadinessError",
    "EnrollmentError",
    "DetectionError",
    "ReportingError",
    "BaseFaceDetector",
    "DetectedFace",
    "AttributeAggregator",
    "CycleReport",
    "LabelRegistry",
    "MatchStatus",
    "RecognitionEngine",
    "RecognitionMatcher",
    "RecognitionResult",
    "ReferenceIdentity",
    "SessionDedupState",
    "SessionDedupTracker",
    "euclidean_distance",
    "CycleScheduler",
    "RecognitionSession",
]
