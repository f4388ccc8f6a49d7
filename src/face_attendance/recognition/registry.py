"""Registry of enrolled identities built from enrollment images."""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

import cv2
import numpy as np

from ..detection import BaseFaceDetector
from ..errors import DetectionError, EnrollmentError
from .types import ReferenceIdentity

logger = logging.getLogger(__name__)


def enroll(
    label: str,
    image: np.ndarray,
    detectors: Sequence[BaseFaceDetector],
    descriptor_dim: Optional[int] = 128,
) -> List[np.ndarray]:
    """Extract reference descriptors for one label.

    Each detector variant runs once on the image and contributes at most
    one descriptor, in detector order.

    Args:
        label: Identity the image belongs to
        image: BGR enrollment image with a single face
        detectors: Detector variants to run
        descriptor_dim: Expected descriptor length, None to skip the check

    Returns:
        Zero or more descriptors
    """
    descriptors = []

    for detector in detectors:
        try:
            face = detector.detect_single(image)
        except DetectionError as e:
            logger.warning(f"{detector.name} detector failed on '{label}': {e}")
            continue

        if face is None:
            logger.debug(f"{detector.name} detector found no face for '{label}'")
            continue

        descriptor = np.array(face.descriptor, dtype=np.float32).flatten()
        if descriptor_dim is not None and descriptor.size != descriptor_dim:
            logger.warning(
                f"Dropping {detector.name} descriptor for '{label}': "
                f"{descriptor.size} values, expected {descriptor_dim}"
            )
            continue

        descriptors.append(descriptor)

    return descriptors


def resolve_labels(
    labels_dir: Union[str, Path],
    labels: Optional[Sequence[str]] = None,
    extension: str = ".jpg",
) -> List[str]:
    """Return the roster: explicit labels, or every image stem in labels_dir."""
    if labels:
        return list(dict.fromkeys(labels))

    dir_path = Path(labels_dir)
    if not dir_path.is_dir():
        logger.warning(f"Directory not found: {labels_dir}")
        return []

    return sorted(path.stem for path in dir_path.glob(f"*{extension}") if path.is_file())


class LabelRegistry:
    """Read-only set of enrolled identities for one session."""

    def __init__(self, identities: Sequence[ReferenceIdentity] = ()):
        self._identities = tuple(identities)
        self._by_label: Dict[str, ReferenceIdentity] = {}

        for identity in self._identities:
            if identity.label in self._by_label:
                raise ValueError(f"Duplicate label: {identity.label}")
            self._by_label[identity.label] = identity

    @classmethod
    def build(
        cls,
        labels_dir: Union[str, Path],
        detectors: Sequence[BaseFaceDetector],
        labels: Optional[Sequence[str]] = None,
        extension: str = ".jpg",
        descriptor_dim: Optional[int] = 128,
    ) -> "LabelRegistry":
        """Enroll every label from images named {label}{extension}.

        Labels whose image is missing or yields no descriptor are left out
        and enrollment continues with the rest.

        Args:
            labels_dir: Directory holding the enrollment images
            detectors: Detector variants run on each image
            labels: Explicit roster; None or empty to use every image
            extension: Enrollment image suffix
            descriptor_dim: Expected descriptor length

        Returns:
            The built registry
        """
        dir_path = Path(labels_dir)
        roster = resolve_labels(dir_path, labels, extension)
        identities = []

        for label in roster:
            try:
                descriptors = cls._enroll_file(
                    label, dir_path / f"{label}{extension}", detectors, descriptor_dim
                )
            except EnrollmentError as e:
                logger.warning(str(e))
                continue

            identities.append(ReferenceIdentity(label, tuple(descriptors)))
            logger.info(f"Enrolled {label} ({len(descriptors)} descriptors)")

        logger.info(f"Enrolled {len(identities)} of {len(roster)} labels")
        return cls(identities)

    @staticmethod
    def _enroll_file(
        label: str,
        image_path: Path,
        detectors: Sequence[BaseFaceDetector],
        descriptor_dim: Optional[int],
    ) -> List[np.ndarray]:
        if not image_path.exists():
            raise EnrollmentError(label, f"image not found: {image_path}")

        image = cv2.imread(str(image_path))
        if image is None:
            raise EnrollmentError(label, f"could not read image: {image_path}")

        descriptors = enroll(label, image, detectors, descriptor_dim)
        if not descriptors:
            raise EnrollmentError(label, "no face detected")

        return descriptors

    def candidates(self) -> Sequence[ReferenceIdentity]:
        """Identities in enrollment order."""
        return self._identities

    def labels(self) -> List[str]:
        """Get list of enrolled labels."""
        return [identity.label for identity in self._identities]

    def get(self, label: str) -> Optional[ReferenceIdentity]:
        return self._by_label.get(label)

    def export_to_npz(self, output_path: Union[str, Path]) -> None:
        """Export descriptors to NPZ format, one array per label.

        Args:
            output_path: Path for output file
        """
        # Arrays are keyed by position so labels never collide with savez arguments
        data = {
            f"identity_{index}": np.stack(identity.descriptors)
            for index, identity in enumerate(self._identities)
        }
        data["labels"] = np.array([identity.label for identity in self._identities], dtype=str)
        np.savez_compressed(output_path, **data)
        logger.info(f"Exported {len(self._identities)} identities to {output_path}")

    @classmethod
    def from_npz(cls, input_path: Union[str, Path]) -> "LabelRegistry":
        """Load a registry exported with export_to_npz.

        Args:
            input_path: Path to NPZ file
        """
        identities = []
        with np.load(input_path) as data:
            labels = data["labels"].tolist() if "labels" in data.files else []
            for index, label in enumerate(labels):
                stored = data[f"identity_{index}"]
                if len(stored) == 0:
                    continue
                identities.append(
                    ReferenceIdentity(label, tuple(np.array(row) for row in stored))
                )

        logger.info(f"Imported {len(identities)} identities from {input_path}")
        return cls(identities)

    def __len__(self) -> int:
        return len(self._identities)

    def __contains__(self, label: str) -> bool:
        return label in self._by_label

    def __iter__(self) -> Iterator[ReferenceIdentity]:
        return iter(self._identities)
