"""Tests for configuration loading."""

from face_attendance.constants import (
    DEFAULT_EXPRESSION_VOCABULARY,
    CameraConfig,
    DetectorConfig,
    EnrollmentConfig,
    RecognitionConfig,
    ReportingConfig,
    SchedulerConfig,
    _get_nested,
    load_config,
)


class TestConfigSections:
    """Test cases for config dataclasses."""

    def test_defaults(self):
        recognition = RecognitionConfig()
        assert recognition.match_threshold == 0.45
        assert recognition.descriptor_dim == 128
        assert recognition.descriptor_strategy == "first"
        assert recognition.expression_vocabulary == DEFAULT_EXPRESSION_VOCABULARY

        assert SchedulerConfig().interval == 1.0
        assert EnrollmentConfig().detector_variants == ["hog", "cnn"]
        assert ReportingConfig().base_url == "http://localhost:4000"

    def test_empty_config_gives_defaults(self):
        assert RecognitionConfig.from_config({}) == RecognitionConfig()
        assert CameraConfig.from_config({}) == CameraConfig()
        assert EnrollmentConfig.from_config({}) == EnrollmentConfig()

    def test_from_config(self, mock_config):
        recognition = RecognitionConfig.from_config(mock_config)
        assert recognition.match_threshold == 0.5
        assert recognition.descriptor_dim == 64
        assert recognition.descriptor_strategy == "all"
        assert recognition.expression_vocabulary == ("happy", "sad")

        scheduler = SchedulerConfig.from_config(mock_config)
        assert scheduler.interval == 0.5
        assert scheduler.detector_timeout == 2.0

        enrollment = EnrollmentConfig.from_config(mock_config)
        assert enrollment.labels_dir == "faces"
        assert enrollment.labels == ["alice", "bob"]
        assert enrollment.detector_variants == ["hog"]

        camera = CameraConfig.from_config(mock_config)
        assert camera.resolution == (640, 480)
        assert camera.fps == 15

        reporting = ReportingConfig.from_config(mock_config)
        assert reporting.enabled is False

    def test_model_path_resolution(self, tmp_path):
        config = DetectorConfig(models_dir=str(tmp_path / "models"))

        assert config.model_path(None) is None
        assert config.model_path("x.dat") == tmp_path / "models" / "x.dat"
        assert config.model_path(str(tmp_path / "abs.dat")) == tmp_path / "abs.dat"


class TestLoadConfig:
    """Test cases for YAML loading."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recognition:\n  match_threshold: 0.4\n")

        config = load_config(path)

        assert config == {"recognition": {"match_threshold": 0.4}}
        assert RecognitionConfig.from_config(config).match_threshold == 0.4

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recognition: [unclosed\n")

        assert load_config(path) == {}

    def test_get_nested(self, mock_config):
        assert _get_nested(mock_config, "camera", "fps") == 15
        assert _get_nested(mock_config, "camera", "missing", default=3) == 3
        assert _get_nested(mock_config, "camera", "fps", "deeper", default="x") == "x"

    def test_null_values_use_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "recognition:\n  match_threshold:\n  descriptor_dim:\n"
            "scheduler:\n  interval: ~\n"
            "camera:\n  fps:\n  resolution:\n"
            "reporting:\n  enabled: false\n  timeout:\n"
        )
        config = load_config(path)

        assert RecognitionConfig.from_config(config) == RecognitionConfig()
        assert SchedulerConfig.from_config(config).interval == 1.0
        assert CameraConfig.from_config(config) == CameraConfig()
        reporting = ReportingConfig.from_config(config)
        assert reporting.enabled is False
        assert reporting.timeout == 10.0

    def test_age_gender_models(self):
        config = DetectorConfig.from_config({
            "detector": {"age_model": "age_net.caffemodel", "gender_proto": None},
        })

        assert config.age_model == "age_net.caffemodel"
        assert config.gender_proto is None
