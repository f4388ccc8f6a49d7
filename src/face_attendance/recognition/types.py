"""Face recognition types."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..constants import UNKNOWN_LABEL


class MatchStatus(Enum):
    """Outcome of matching one face against the registry.

    - MATCHED: Closest enrolled identity is within the threshold
    - UNKNOWN: No enrolled identity is close enough
    """
    MATCHED = "matched"
    UNKNOWN = "unknown"


@dataclass(frozen=True, eq=False)
class ReferenceIdentity:
    """An enrolled label and its reference descriptors, in enrollment order."""

    label: str
    descriptors: Tuple[np.ndarray, ...]

    def __post_init__(self):
        if not self.descriptors:
            raise ValueError(f"Identity '{self.label}' has no descriptors")
        for descriptor in self.descriptors:
            descriptor.setflags(write=False)

    @property
    def primary(self) -> np.ndarray:
        """The first enrolled descriptor."""
        return self.descriptors[0]

    def __len__(self) -> int:
        return len(self.descriptors)


@dataclass
class RecognitionResult:
    """Result of recognizing one detected face in one cycle."""

    status: MatchStatus
    label: Optional[str] = None
    # Distance to the accepted identity, or the closest one for UNKNOWN
    distance: Optional[float] = None
    dominant_expression: Optional[str] = None
    expressions: Dict[str, float] = field(default_factory=dict)
    age: Optional[float] = None
    gender: Optional[str] = None
    bbox: Tuple[int, int, int, int] = (0, 0, 0, 0)
    landmarks: List[Tuple[int, int]] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    @property
    def is_matched(self) -> bool:
        return self.status == MatchStatus.MATCHED

    @property
    def identity(self) -> str:
        """Display name: the label, or "Unknown"."""
        return self.label if self.is_matched else UNKNOWN_LABEL

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.identity,
            "status": self.status.value,
            "distance": self.distance,
            "gender": self.gender,
            "age": None if self.age is None else round(self.age),
            "expressions": dict(self.expressions),
            "dominant_expression": self.dominant_expression,
            "bbox": list(self.bbox),
            "timestamp": self.timestamp,
        }
