"""Nearest-identity matching by Euclidean distance."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..detection import DetectedFace
from .types import MatchStatus, RecognitionResult, ReferenceIdentity

logger = logging.getLogger(__name__)

DESCRIPTOR_STRATEGIES = ("first", "all")


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two descriptors."""
    a = np.asarray(a, dtype=np.float64).flatten()
    b = np.asarray(b, dtype=np.float64).flatten()
    return float(np.linalg.norm(a - b))


class RecognitionMatcher:
    """Maps a face descriptor to the closest enrolled identity.

    Candidates are scanned in registry order and the running minimum is
    replaced only on a strictly smaller distance, so the first identity
    reaching a minimum keeps it. The closest identity is accepted only if
    its distance is strictly below the threshold.
    """

    def __init__(
        self,
        threshold: float = 0.45,
        descriptor_strategy: str = "first",
        descriptor_dim: Optional[int] = 128,
    ):
        """Initialize matcher.

        Args:
            threshold: Exclusive upper bound on an accepted distance
            descriptor_strategy: "first" compares each identity's first
                descriptor only; "all" uses its closest descriptor
            descriptor_dim: Expected descriptor length, None to skip the check
        """
        if descriptor_strategy not in DESCRIPTOR_STRATEGIES:
            raise ValueError(
                f"Unknown descriptor strategy: {descriptor_strategy}. "
                f"Available: {list(DESCRIPTOR_STRATEGIES)}"
            )

        self.threshold = threshold
        self.descriptor_strategy = descriptor_strategy
        self.descriptor_dim = descriptor_dim

    def identity_distance(self, descriptor: np.ndarray, identity: ReferenceIdentity) -> float:
        """Distance between a descriptor and one identity."""
        if self.descriptor_strategy == "first":
            return euclidean_distance(descriptor, identity.primary)
        return min(euclidean_distance(descriptor, stored) for stored in identity.descriptors)

    def find_closest(
        self,
        descriptor: np.ndarray,
        candidates: Sequence[ReferenceIdentity],
    ) -> Tuple[Optional[str], Optional[float]]:
        """Find the closest identity regardless of threshold.

        Returns:
            Tuple of (label, distance) or (None, None) for no candidates
        """
        best_label = None
        best_distance = None

        for identity in candidates:
            distance = self.identity_distance(descriptor, identity)
            if best_distance is None or distance < best_distance:
                best_label = identity.label
                best_distance = distance

        return best_label, best_distance

    def match(
        self,
        face: DetectedFace,
        candidates: Sequence[ReferenceIdentity],
    ) -> RecognitionResult:
        """Recognize one detected face.

        The returned result carries the face's box and landmarks; the
        caller fills in aggregated attributes.
        """
        result = RecognitionResult(
            status=MatchStatus.UNKNOWN,
            expressions=dict(face.expressions),
            age=face.age,
            gender=face.gender,
            bbox=face.bbox,
            landmarks=list(face.landmarks),
        )

        if not face.has_descriptor:
            return result

        descriptor = np.asarray(face.descriptor).flatten()
        if self.descriptor_dim is not None and descriptor.size != self.descriptor_dim:
            logger.warning(
                f"Descriptor has {descriptor.size} values, expected {self.descriptor_dim}"
            )
            return result

        label, distance = self.find_closest(descriptor, candidates)
        result.distance = distance

        if label is not None and distance < self.threshold:
            result.status = MatchStatus.MATCHED
            result.label = label

        return result
