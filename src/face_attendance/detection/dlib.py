"""Dlib face detector producing 128D descriptors."""

import logging
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

from ..errors import DetectionError, ModelReadinessError
from .age_gender import AgeGenderClassifier
from .base import BaseFaceDetector
from .expression import ExpressionClassifier
from .types import DetectedFace

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DlibFaceDetector(BaseFaceDetector):
    """Face detector using dlib with HOG or CNN model.

    Every detected face gets 68-point landmarks and a 128D descriptor from
    dlib's ResNet recognition model. Expressions, age and gender are added
    when the matching classifiers are supplied.

    Pros: Very accurate, descriptors on the same scale as the 0.45 threshold
    Cons: CNN variant is slow on CPU, requires dlib compilation
    """

    VARIANTS = ("hog", "cnn")

    def __init__(
        self,
        shape_predictor_path: PathLike,
        recognition_model_path: PathLike,
        use_cnn: bool = False,
        cnn_model_path: Optional[PathLike] = None,
        upsample_num_times: int = 1,
        expression_classifier: Optional[ExpressionClassifier] = None,
        age_gender_classifier: Optional[AgeGenderClassifier] = None,
    ):
        """Initialize dlib face detector.

        Args:
            shape_predictor_path: shape_predictor_68_face_landmarks.dat
            recognition_model_path: dlib_face_recognition_resnet_model_v1.dat
            use_cnn: Use the MMOD CNN detector instead of HOG
            cnn_model_path: mmod_human_face_detector.dat, required with use_cnn
            upsample_num_times: Image upsampling before detection
            expression_classifier: Optional expression model
            age_gender_classifier: Optional age/gender model
        """
        self.use_cnn = use_cnn
        self.upsample_num_times = upsample_num_times
        self._shape_predictor_path = Path(shape_predictor_path)
        self._recognition_model_path = Path(recognition_model_path)
        self._cnn_model_path = Path(cnn_model_path) if cnn_model_path else None
        self._expression_classifier = expression_classifier
        self._age_gender_classifier = age_gender_classifier

        self._detector = None
        self._shape_predictor = None
        self._face_rec = None

    @property
    def name(self) -> str:
        return "cnn" if self.use_cnn else "hog"

    @property
    def expression_classifier(self) -> Optional[ExpressionClassifier]:
        return self._expression_classifier

    @property
    def age_gender_classifier(self) -> Optional[AgeGenderClassifier]:
        return self._age_gender_classifier

    @property
    def is_ready(self) -> bool:
        return self._face_rec is not None

    def prepare(self) -> None:
        """Load dlib models.

        Raises:
            ModelReadinessError: If dlib is missing or a model file is absent
        """
        if self.is_ready:
            return

        try:
            import dlib
        except ImportError as e:
            raise ModelReadinessError(
                "dlib is required. Install with: pip install dlib"
            ) from e

        for path, url in (
            (self._shape_predictor_path,
             "http://dlib.net/files/shape_predictor_68_face_landmarks.dat.bz2"),
            (self._recognition_model_path,
             "http://dlib.net/files/dlib_face_recognition_resnet_model_v1.dat.bz2"),
        ):
            if not path.exists():
                raise ModelReadinessError(f"Model not found: {path}. Download from: {url}")

        if self._expression_classifier is not None:
            self._expression_classifier.prepare()
        if self._age_gender_classifier is not None:
            self._age_gender_classifier.prepare()

        try:
            if self.use_cnn:
                if self._cnn_model_path is None or not self._cnn_model_path.exists():
                    raise ModelReadinessError(
                        "CNN model not found. Download from: "
                        "http://dlib.net/files/mmod_human_face_detector.dat.bz2"
                    )
                self._detector = dlib.cnn_face_detection_model_v1(str(self._cnn_model_path))
                logger.info("Initialized dlib CNN face detector")
            else:
                self._detector = dlib.get_frontal_face_detector()
                logger.info("Initialized dlib HOG face detector")

            self._shape_predictor = dlib.shape_predictor(str(self._shape_predictor_path))
            self._face_rec = dlib.face_recognition_model_v1(str(self._recognition_model_path))
        except RuntimeError as e:
            raise ModelReadinessError(f"Failed to load dlib models: {e}") from e

        logger.info(f"Loaded dlib recognition model from {self._recognition_model_path}")

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces and compute their descriptors.

        Raises:
            DetectionError: If models are not ready or any stage fails on this frame
        """
        try:
            self.prepare()
        except ModelReadinessError as e:
            raise DetectionError(f"dlib {self.name} detector not ready: {e}") from e

        try:
            bgr_image = self._to_bgr(image)
            # dlib expects RGB
            rgb_image = cv2.cvtColor(bgr_image, cv2.COLOR_BGR2RGB)

            if self.use_cnn:
                detections = self._detector(rgb_image, self.upsample_num_times)
                faces_data = [(d.rect, d.confidence) for d in detections]
            else:
                detections, scores, _ = self._detector.run(
                    rgb_image, self.upsample_num_times, 0.0
                )
                faces_data = list(zip(detections, scores))

            detected = []
            for rect, confidence in faces_data:
                face = self._describe(bgr_image, rgb_image, rect, confidence)
                if face is not None:
                    detected.append(face)
        except (RuntimeError, cv2.error, ModelReadinessError) as e:
            raise DetectionError(f"dlib {self.name} detection failed: {e}") from e

        return detected

    @staticmethod
    def _to_bgr(image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
        return image

    def _describe(self, image, rgb_image, rect, confidence) -> Optional[DetectedFace]:
        """Build a DetectedFace for one dlib rectangle, clipped to the frame."""
        frame_height, frame_width = image.shape[:2]
        x = max(0, rect.left())
        y = max(0, rect.top())
        # dlib rectangles are inclusive of right/bottom
        width = min(frame_width, rect.right() + 1) - x
        height = min(frame_height, rect.bottom() + 1) - y

        if width <= 0 or height <= 0:
            return None

        shape = self._shape_predictor(rgb_image, rect)
        descriptor = np.array(
            self._face_rec.compute_face_descriptor(rgb_image, shape),
            dtype=np.float32,
        )
        landmarks = [(point.x, point.y) for point in shape.parts()]

        crop = image[y:y + height, x:x + width]

        expressions = {}
        if self._expression_classifier is not None:
            expressions = self._expression_classifier.classify(crop)

        age, gender, gender_probability = None, None, None
        if self._age_gender_classifier is not None:
            age, gender, gender_probability = self._age_gender_classifier.estimate(crop)

        return DetectedFace(
            x=x, y=y, width=width, height=height,
            descriptor=descriptor,
            confidence=float(confidence),
            landmarks=landmarks,
            expressions=expressions,
            age=age,
            gender=gender,
            gender_probability=gender_probability,
        )
