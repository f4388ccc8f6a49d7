"""Face detection backends.

Available backends:
- hog: dlib HOG detector, fast on CPU (default for live frames)
- cnn: dlib MMOD CNN detector, more accurate, slower
"""

from .types import DetectedFace
from .base import BaseFaceDetector
from .dlib import DlibFaceDetector
from .expression import ExpressionClassifier
from .age_gender import AgeGenderClassifier
from .detector import (
    DETECTION_BACKENDS,
    available_backends,
    create_age_gender_classifier,
    create_detector,
    create_enrollment_detectors,
)

__all__ = [
    "DetectedFace",
    "BaseFaceDetector",
    "DlibFaceDetector",
    "ExpressionClassifier",
    "AgeGenderClassifier",
    "create_age_gender_classifier",
    "DETECTION_BACKENDS",
    "available_backends",
    "create_detector",
    "create_enrollment_detectors",
]
