"""Base face detector interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .types import DetectedFace


class BaseFaceDetector(ABC):
    """Abstract base class for face detectors.

    A detector finds faces in a BGR frame and fills in each face's
    descriptor, landmarks and whatever attributes its models provide.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the detector variant."""
        pass

    def prepare(self) -> None:
        """Load models so the first detect() call does not pay for it.

        Raises:
            ModelReadinessError: If a required model cannot be loaded
        """

    @abstractmethod
    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in an image.

        Args:
            image: BGR image as numpy array

        Returns:
            List of DetectedFace objects, possibly empty
        """
        pass

    def detect_single(self, image: np.ndarray) -> Optional[DetectedFace]:
        """Detect the single face in an enrollment image.

        The largest face with a descriptor is returned when the image
        holds more than one.
        """
        faces = [face for face in self.detect(image) if face.has_descriptor]
        if not faces:
            return None
        return max(faces, key=lambda face: face.area)

    def close(self) -> None:
        """Release model resources."""
