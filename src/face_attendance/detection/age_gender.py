"""Age and gender estimation using the Levi-Hassner Caffe models via OpenCV DNN."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from ..errors import ModelReadinessError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class AgeGenderClassifier:
    """Estimated age and gender for a cropped face.

    The age network scores eight age brackets; the reported age is the
    probability-weighted mean of the bracket midpoints. The gender network
    scores male/female.
    """

    MODEL_URL = "https://github.com/GilLevi/AgeGenderDeepLearning/tree/master/models"
    INPUT_SIZE = (227, 227)
    # Mean BGR values the networks were trained with
    MODEL_MEAN = (78.4263377603, 87.7689143744, 114.895847746)

    AGE_BRACKETS = (
        (0, 2), (4, 6), (8, 12), (15, 20),
        (25, 32), (38, 43), (48, 53), (60, 100),
    )
    GENDERS = ("male", "female")

    def __init__(
        self,
        age_model_path: PathLike,
        age_proto_path: PathLike,
        gender_model_path: PathLike,
        gender_proto_path: PathLike,
    ):
        """Initialize age/gender classifier.

        Args:
            age_model_path: age_net.caffemodel
            age_proto_path: age_deploy.prototxt
            gender_model_path: gender_net.caffemodel
            gender_proto_path: gender_deploy.prototxt
        """
        self._age_paths = (Path(age_proto_path), Path(age_model_path))
        self._gender_paths = (Path(gender_proto_path), Path(gender_model_path))
        self._age_net = None
        self._gender_net = None

    @property
    def is_ready(self) -> bool:
        return self._age_net is not None and self._gender_net is not None

    def prepare(self) -> None:
        """Load both Caffe networks.

        Raises:
            ModelReadinessError: If a model file is missing or unreadable
        """
        if self.is_ready:
            return

        for path in (*self._age_paths, *self._gender_paths):
            if not path.exists():
                raise ModelReadinessError(
                    f"Age/gender model not found at {path}. Download from: {self.MODEL_URL}"
                )

        try:
            self._age_net = cv2.dnn.readNetFromCaffe(*(str(p) for p in self._age_paths))
            self._gender_net = cv2.dnn.readNetFromCaffe(*(str(p) for p in self._gender_paths))
        except cv2.error as e:
            self._age_net = None
            self._gender_net = None
            raise ModelReadinessError(f"Failed to load age/gender models: {e}") from e

        logger.info(f"Loaded age/gender models from {self._age_paths[1].parent}")

    def estimate(
        self, face_image: np.ndarray
    ) -> Tuple[Optional[float], Optional[str], Optional[float]]:
        """Estimate age and gender for a cropped BGR face.

        Returns:
            (age, gender, gender_probability), all None for an empty crop
        """
        if face_image is None or face_image.size == 0:
            return None, None, None

        self.prepare()

        blob = cv2.dnn.blobFromImage(
            face_image, 1.0, self.INPUT_SIZE, self.MODEL_MEAN, swapRB=False
        )

        self._gender_net.setInput(blob)
        gender, probability = self.gender_from_scores(self._gender_net.forward().flatten())

        self._age_net.setInput(blob)
        age = self.age_from_scores(self._age_net.forward().flatten())

        return age, gender, probability

    @classmethod
    def age_from_scores(cls, scores: np.ndarray) -> Optional[float]:
        """Expected age over the bracket midpoints."""
        scores = np.asarray(scores, dtype=np.float64)
        total = scores.sum()
        if scores.size != len(cls.AGE_BRACKETS) or total <= 0:
            return None

        midpoints = np.array([(low + high) / 2.0 for low, high in cls.AGE_BRACKETS])
        return float(np.dot(scores / total, midpoints))

    @classmethod
    def gender_from_scores(cls, scores: np.ndarray) -> Tuple[Optional[str], Optional[float]]:
        """Most likely gender and its probability. Ties go to the first class."""
        scores = np.asarray(scores, dtype=np.float64)
        total = scores.sum()
        if scores.size != len(cls.GENDERS) or total <= 0:
            return None, None

        probabilities = scores / total
        index = int(np.argmax(probabilities))
        return cls.GENDERS[index], float(probabilities[index])
