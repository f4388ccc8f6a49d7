"""Detected face data type."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np


@dataclass
class DetectedFace:
    """A face found in one frame, with its descriptor and attributes.

    Produced by a detector for a single cycle and discarded afterwards.
    """

    x: int
    y: int
    width: int
    height: int
    descriptor: Optional[np.ndarray] = None
    confidence: float = 1.0
    landmarks: List[Tuple[int, int]] = field(default_factory=list)
    # Expression name -> probability, in vocabulary order
    expressions: Dict[str, float] = field(default_factory=dict)
    age: Optional[float] = None
    gender: Optional[str] = None
    gender_probability: Optional[float] = None

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        """Return bounding box as (x, y, w, h)."""
        return (self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Tuple[int, int]:
        """Return center point of bounding box."""
        return (self.x + self.width // 2, self.y + self.height // 2)

    @property
    def area(self) -> int:
        """Return area of bounding box."""
        return self.width * self.height

    @property
    def has_descriptor(self) -> bool:
        return self.descriptor is not None and self.descriptor.size > 0
