"""Tests for the command line interface and detector construction."""

from types import SimpleNamespace

import cv2
import numpy as np
import pytest

from conftest import StubDetector, axis_vector, make_face
from face_attendance import cli
from face_attendance.constants import (
    DetectorConfig,
    EnrollmentConfig,
    RecognitionConfig,
)
from face_attendance.detection import (
    DlibFaceDetector,
    ExpressionClassifier,
    available_backends,
    create_detector,
)
from face_attendance.errors import ModelReadinessError
from face_attendance.recognition import LabelRegistry, ReferenceIdentity


def make_config(tmp_path, **enrollment):
    enrollment.setdefault("labels_dir", str(tmp_path))
    enrollment.setdefault("image_extension", ".png")
    enrollment.setdefault("detector_variants", ["hog"])
    return SimpleNamespace(
        enrollment=EnrollmentConfig(**enrollment),
        detector=DetectorConfig(),
        recognition=RecognitionConfig(),
    )


@pytest.fixture
def enrollment_dir(tmp_path, monkeypatch):
    """Two labelled images and a stub detector keyed on their fill value."""
    cv2.imwrite(str(tmp_path / "alice.png"), np.full((20, 20, 3), 1, dtype=np.uint8))
    cv2.imwrite(str(tmp_path / "bob.png"), np.full((20, 20, 3), 2, dtype=np.uint8))

    detector = StubDetector({
        1: [make_face(axis_vector(0, 0.1))],
        2: [make_face(axis_vector(1, 0.2))],
    })
    monkeypatch.setattr(cli, "create_enrollment_detectors", lambda variants, config: [detector])
    return tmp_path


class TestParser:
    """Test cases for argument parsing."""

    def test_run_flags(self):
        args = cli.create_parser().parse_args(["run", "--no-display", "--labels-dir", "faces"])

        assert args.command == "run"
        assert args.no_display is True
        assert args.no_report is False
        assert args.labels_dir == "faces"
        assert args.func is cli.cmd_run

    def test_enroll_requires_output(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["enroll"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args([])


class TestEnrollCommand:
    """Test cases for the enroll command and registry loading."""

    def test_enroll_writes_cache(self, enrollment_dir, tmp_path):
        output = tmp_path / "registry.npz"
        args = SimpleNamespace(labels_dir=None, output=str(output))

        assert cli.cmd_enroll(args, make_config(enrollment_dir)) == 0

        registry = LabelRegistry.from_npz(output)
        assert registry.labels() == ["alice", "bob"]
        assert registry.get("bob").primary[1] == pytest.approx(0.2)

    def test_enroll_nothing_fails(self, tmp_path, monkeypatch):
        monkeypatch.setattr(cli, "create_enrollment_detectors", lambda variants, config: [StubDetector()])
        args = SimpleNamespace(labels_dir=None, output=str(tmp_path / "out.npz"))

        assert cli.cmd_enroll(args, make_config(tmp_path / "empty")) == 1
        assert not (tmp_path / "out.npz").exists()

    def test_enroll_model_failure(self, tmp_path, monkeypatch):
        failing = StubDetector(fail_prepare=True)
        monkeypatch.setattr(cli, "create_enrollment_detectors", lambda variants, config: [failing])
        args = SimpleNamespace(labels_dir=None, output=str(tmp_path / "out.npz"))

        assert cli.cmd_enroll(args, make_config(tmp_path)) == 1

    def test_build_registry_prefers_cache(self, tmp_path, monkeypatch):
        cache = tmp_path / "cache.npz"
        LabelRegistry([ReferenceIdentity("carol", (axis_vector(4, 0.5),))]).export_to_npz(cache)

        def fail(variants, config):
            raise AssertionError("detectors should not be built")

        monkeypatch.setattr(cli, "create_enrollment_detectors", fail)

        registry = cli.build_registry(make_config(tmp_path, cache_path=str(cache)))

        assert registry.labels() == ["carol"]

    def test_build_registry_enrolls_without_cache(self, enrollment_dir):
        config = make_config(enrollment_dir, labels=["bob"], cache_path=str(enrollment_dir / "none.npz"))

        registry = cli.build_registry(config)

        assert registry.labels() == ["bob"]


class TestDetectorFactory:
    """Test cases for detector construction."""

    def test_available_backends(self):
        assert set(available_backends()) == {"hog", "cnn"}

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_detector("mtcnn")

    def test_cnn_variant(self):
        detector = create_detector("cnn", DetectorConfig(expression_model="ferplus.onnx"))

        assert isinstance(detector, DlibFaceDetector)
        assert detector.name == "cnn"
        assert detector.expression_classifier is not None

    def test_enrollment_detectors_skip_expressions(self):
        detector = create_detector(
            "hog", DetectorConfig(expression_model="ferplus.onnx"), with_attributes=False
        )

        assert detector.name == "hog"
        assert detector.expression_classifier is None

    def test_missing_models_raise_readiness_error(self, tmp_path):
        detector = create_detector("hog", DetectorConfig(models_dir=str(tmp_path)))

        with pytest.raises(ModelReadinessError):
            detector.prepare()


class TestExpressionClassifier:
    """Test cases for ExpressionClassifier score handling."""

    def test_distribution_follows_vocabulary(self):
        classifier = ExpressionClassifier("unused.onnx", vocabulary=("sad", "happy", "neutral"))
        # neutral, happy, surprised, sad, angry, disgusted, fearful, contempt
        scores = np.array([1.0, 3.0, 0.0, 2.0, 0.0, 0.0, 0.0, 5.0])

        distribution = classifier._to_distribution(scores)

        assert list(distribution) == ["sad", "happy", "neutral"]
        assert sum(distribution.values()) == pytest.approx(1.0)
        assert distribution["happy"] > distribution["sad"] > distribution["neutral"]

    def test_missing_model(self, tmp_path):
        classifier = ExpressionClassifier(tmp_path / "missing.onnx")

        with pytest.raises(ModelReadinessError):
            classifier.prepare()

    def test_empty_crop(self):
        classifier = ExpressionClassifier("unused.onnx")

        assert classifier.classify(np.zeros((0, 0, 3), dtype=np.uint8)) == {}
