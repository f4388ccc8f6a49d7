"""Face recognition module.

Contains:
- LabelRegistry: Enrolled identities built from enrollment images
- RecognitionMatcher: Nearest-identity matching by Euclidean distance
- AttributeAggregator: Dominant expression selection
- SessionDedupTracker: First-sighting tracking per session
- RecognitionEngine: One recognition cycle combining the above
"""

from .types import MatchStatus, RecognitionResult, ReferenceIdentity
from .registry import LabelRegistry, enroll, resolve_labels
from .matcher import DESCRIPTOR_STRATEGIES, RecognitionMatcher, euclidean_distance
from .attributes import AttributeAggregator
from .dedup import SessionDedupState, SessionDedupTracker
from .engine import CycleReport, RecognitionEngine

__all__ = [
    # Types
    "MatchStatus", "RecognitionResult", "ReferenceIdentity",
    # Registry
    "LabelRegistry", "enroll", "resolve_labels",
    # Matching
    "RecognitionMatcher", "euclidean_distance", "DESCRIPTOR_STRATEGIES",
    # Attributes
    "AttributeAggregator",
    # Dedup
    "SessionDedupState", "SessionDedupTracker",
    # Engine
    "CycleReport", "RecognitionEngine",
]
