"""Facial expression classifier using a FER+ model via OpenCV DNN."""

import logging
from pathlib import Path
from typing import Dict, Sequence, Union

import cv2
import numpy as np

from ..constants import DEFAULT_EXPRESSION_VOCABULARY
from ..errors import ModelReadinessError

logger = logging.getLogger(__name__)


class ExpressionClassifier:
    """Expression probabilities from the ONNX FER+ network.

    The network scores 8 classes on a 64x64 grayscale crop. Contempt has no
    place in the vocabulary, so it is dropped and the rest renormalized.
    """

    MODEL_URL = (
        "https://github.com/onnx/models/raw/main/validated/vision/body_analysis/"
        "emotion_ferplus/model/emotion-ferplus-8.onnx"
    )
    INPUT_SIZE = (64, 64)
    # FER+ output order mapped onto vocabulary names
    OUTPUT_CLASSES = (
        "neutral",
        "happy",
        "surprised",
        "sad",
        "angry",
        "disgusted",
        "fearful",
        "contempt",
    )

    def __init__(
        self,
        model_path: Union[str, Path],
        vocabulary: Sequence[str] = DEFAULT_EXPRESSION_VOCABULARY,
    ):
        """Initialize expression classifier.

        Args:
            model_path: Path to emotion-ferplus-8.onnx
            vocabulary: Expression names, in the order results are reported
        """
        self._model_path = Path(model_path)
        self._vocabulary = tuple(vocabulary)
        self._net = None

    def prepare(self) -> None:
        """Load the ONNX network."""
        if self._net is not None:
            return

        if not self._model_path.exists():
            raise ModelReadinessError(
                f"Expression model not found at {self._model_path}. "
                f"Download from: {self.MODEL_URL}"
            )

        try:
            self._net = cv2.dnn.readNetFromONNX(str(self._model_path))
        except cv2.error as e:
            raise ModelReadinessError(f"Failed to load expression model: {e}") from e

        logger.info(f"Loaded expression model from {self._model_path}")

    def classify(self, face_image: np.ndarray) -> Dict[str, float]:
        """Score expressions for a cropped BGR face.

        Returns:
            Mapping of expression name to probability in vocabulary order,
            or an empty mapping for an empty crop
        """
        if face_image is None or face_image.size == 0:
            return {}

        self.prepare()

        gray = cv2.cvtColor(face_image, cv2.COLOR_BGR2GRAY)
        resized = cv2.resize(gray, self.INPUT_SIZE)
        blob = resized.astype(np.float32).reshape(1, 1, *self.INPUT_SIZE)

        self._net.setInput(blob)
        scores = self._net.forward().flatten()

        return self._to_distribution(scores)

    def _to_distribution(self, scores: np.ndarray) -> Dict[str, float]:
        """Softmax the raw scores and reorder them by vocabulary."""
        exp = np.exp(scores - np.max(scores))
        probabilities = dict(zip(self.OUTPUT_CLASSES, exp / exp.sum()))

        kept = {name: float(probabilities.get(name, 0.0)) for name in self._vocabulary}
        total = sum(kept.values())
        if total <= 0:
            return kept

        return {name: value / total for name, value in kept.items()}
