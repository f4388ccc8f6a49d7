"""Detector construction from configuration."""

from typing import List, Optional, Sequence

from ..constants import DEFAULT_EXPRESSION_VOCABULARY, DetectorConfig
from .age_gender import AgeGenderClassifier
from .base import BaseFaceDetector
from .dlib import DlibFaceDetector
from .expression import ExpressionClassifier


def _build_dlib(use_cnn: bool):
    def build(
        config: DetectorConfig,
        expression: Optional[ExpressionClassifier],
        age_gender: Optional[AgeGenderClassifier],
    ):
        return DlibFaceDetector(
            shape_predictor_path=config.model_path(config.shape_predictor),
            recognition_model_path=config.model_path(config.recognition_model),
            use_cnn=use_cnn,
            cnn_model_path=config.model_path(config.cnn_detector),
            upsample_num_times=config.upsample_num_times,
            expression_classifier=expression,
            age_gender_classifier=age_gender,
        )
    return build


DETECTION_BACKENDS = {
    "hog": _build_dlib(use_cnn=False),
    "cnn": _build_dlib(use_cnn=True),
}


def create_age_gender_classifier(config: DetectorConfig) -> Optional[AgeGenderClassifier]:
    """Build the age/gender classifier if all four model files are configured."""
    paths = [
        config.model_path(name)
        for name in (config.age_model, config.age_proto, config.gender_model, config.gender_proto)
    ]
    if any(path is None for path in paths):
        return None
    return AgeGenderClassifier(*paths)


def create_detector(
    variant: str,
    config: Optional[DetectorConfig] = None,
    expression_vocabulary: Sequence[str] = DEFAULT_EXPRESSION_VOCABULARY,
    with_attributes: bool = True,
) -> BaseFaceDetector:
    """Create a detector by variant name.

    Args:
        variant: One of DETECTION_BACKENDS
        config: Model locations; defaults used if None
        expression_vocabulary: Expression names reported per face
        with_attributes: Attach the expression and age/gender models that are configured

    Raises:
        ValueError: If the variant is unknown
    """
    if variant not in DETECTION_BACKENDS:
        raise ValueError(
            f"Unknown backend: {variant}. "
            f"Available: {list(DETECTION_BACKENDS.keys())}"
        )

    config = config or DetectorConfig()

    expression = None
    age_gender = None
    if with_attributes:
        expression_path = config.model_path(config.expression_model)
        if expression_path is not None:
            expression = ExpressionClassifier(expression_path, vocabulary=expression_vocabulary)
        age_gender = create_age_gender_classifier(config)

    return DETECTION_BACKENDS[variant](config, expression, age_gender)


def create_enrollment_detectors(
    variants: Sequence[str],
    config: Optional[DetectorConfig] = None,
) -> List[BaseFaceDetector]:
    """Create one detector per enrollment variant, without attribute models."""
    return [
        create_detector(variant, config, with_attributes=False)
        for variant in variants
    ]


def available_backends() -> List[str]:
    """Return list of available detection backends."""
    return list(DETECTION_BACKENDS.keys())
