"""Centralized constants and configuration loader.

Values are loaded from config/config.yaml when available, otherwise the
dataclass defaults below are used.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

# Expression classes in the order the expression model reports them
DEFAULT_EXPRESSION_VOCABULARY = (
    "neutral",
    "happy",
    "sad",
    "angry",
    "fearful",
    "disgusted",
    "surprised",
)

UNKNOWN_LABEL = "Unknown"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
        logger.warning(f"Config file not found: {path}, using defaults")
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Recognition
# ============================================================

@dataclass
class RecognitionConfig:
    """Matching and attribute constants."""
    # Euclidean distance below which a face matches (exclusive)
    match_threshold: float = 0.45
    # Descriptor length shared by registry and live faces
    descriptor_dim: int = 128
    # "first" compares against the first enrolled descriptor only,
    # "all" takes the minimum over every enrolled descriptor
    descriptor_strategy: str = "first"
    expression_vocabulary: Tuple[str, ...] = DEFAULT_EXPRESSION_VOCABULARY

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RecognitionConfig":
        """Create from config dictionary."""
        rc = _get_nested(config, "recognition") or {}
        vocabulary = _get_nested(rc, "expression_vocabulary", default=DEFAULT_EXPRESSION_VOCABULARY)

        return cls(
            match_threshold=float(_get_nested(rc, "match_threshold", default=0.45)),
            descriptor_dim=int(_get_nested(rc, "descriptor_dim", default=128)),
            descriptor_strategy=_get_nested(rc, "descriptor_strategy", default="first"),
            expression_vocabulary=tuple(vocabulary),
        )


# ============================================================
# Scheduler
# ============================================================

@dataclass
class SchedulerConfig:
    """Detection cycle timing."""
    # Seconds between cycle ticks
    interval: float = 1.0
    # Seconds a single detector call may take before the cycle is skipped
    detector_timeout: float = 5.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SchedulerConfig":
        """Create from config dictionary."""
        sc = _get_nested(config, "scheduler") or {}

        return cls(
            interval=float(_get_nested(sc, "interval", default=1.0)),
            detector_timeout=float(_get_nested(sc, "detector_timeout", default=5.0)),
        )


# ============================================================
# Enrollment
# ============================================================

@dataclass
class EnrollmentConfig:
    """Where enrollment images live and how they are processed."""
    labels_dir: str = "data/labels"
    # Explicit roster; empty means every image in labels_dir
    labels: List[str] = field(default_factory=list)
    image_extension: str = ".jpg"
    # Detector variants run once each per enrollment image
    detector_variants: List[str] = field(default_factory=lambda: ["hog", "cnn"])
    # Optional .npz file with previously enrolled descriptors
    cache_path: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EnrollmentConfig":
        """Create from config dictionary."""
        ec = _get_nested(config, "enrollment") or {}

        return cls(
            labels_dir=_get_nested(ec, "labels_dir", default="data/labels"),
            labels=list(_get_nested(ec, "labels") or []),
            image_extension=_get_nested(ec, "image_extension", default=".jpg"),
            detector_variants=list(_get_nested(ec, "detector_variants") or ["hog", "cnn"]),
            cache_path=_get_nested(ec, "cache_path"),
        )


# ============================================================
# Detector models
# ============================================================

@dataclass
class DetectorConfig:
    """dlib detector and model file locations."""
    # Variant used for live frames
    backend: str = "hog"
    upsample_num_times: int = 1
    models_dir: str = "data/models"
    shape_predictor: str = "shape_predictor_68_face_landmarks.dat"
    recognition_model: str = "dlib_face_recognition_resnet_model_v1.dat"
    cnn_detector: str = "mmod_human_face_detector.dat"
    # Optional FER+ ONNX model; without it no expressions are reported
    expression_model: Optional[str] = None
    # Optional Caffe age/gender models; all four are needed to report them
    age_model: Optional[str] = None
    age_proto: Optional[str] = None
    gender_model: Optional[str] = None
    gender_proto: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DetectorConfig":
        """Create from config dictionary."""
        dc = _get_nested(config, "detector") or {}

        return cls(
            backend=_get_nested(dc, "backend", default="hog"),
            upsample_num_times=int(_get_nested(dc, "upsample_num_times", default=1)),
            models_dir=_get_nested(dc, "models_dir", default="data/models"),
            shape_predictor=_get_nested(
                dc, "shape_predictor", default="shape_predictor_68_face_landmarks.dat"
            ),
            recognition_model=_get_nested(
                dc, "recognition_model", default="dlib_face_recognition_resnet_model_v1.dat"
            ),
            cnn_detector=_get_nested(dc, "cnn_detector", default="mmod_human_face_detector.dat"),
            expression_model=_get_nested(dc, "expression_model"),
            age_model=_get_nested(dc, "age_model"),
            age_proto=_get_nested(dc, "age_proto"),
            gender_model=_get_nested(dc, "gender_model"),
            gender_proto=_get_nested(dc, "gender_proto"),
        )

    def model_path(self, filename: Optional[str]) -> Optional[Path]:
        """Resolve a model filename against models_dir."""
        if not filename:
            return None
        path = Path(filename)
        if path.is_absolute() or path.exists():
            return path
        return Path(self.models_dir) / filename


# ============================================================
# Camera
# ============================================================

@dataclass
class CameraConfig:
    """Video source settings."""
    device_id: int = 0
    # Frame resolution (width, height)
    resolution: Tuple[int, int] = (940, 650)
    fps: int = 30

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CameraConfig":
        """Create from config dictionary."""
        cc = _get_nested(config, "camera") or {}
        resolution = _get_nested(cc, "resolution", default=[940, 650])

        return cls(
            device_id=int(_get_nested(cc, "device_id", default=0)),
            resolution=tuple(resolution),
            fps=int(_get_nested(cc, "fps", default=30)),
        )


# ============================================================
# Attendance reporting
# ============================================================

@dataclass
class ReportingConfig:
    """Attendance API settings."""
    enabled: bool = True
    base_url: str = "http://localhost:4000"
    # Seconds before an attendance request is abandoned
    timeout: float = 10.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ReportingConfig":
        """Create from config dictionary."""
        rc = _get_nested(config, "reporting") or {}

        return cls(
            enabled=bool(_get_nested(rc, "enabled", default=True)),
            base_url=_get_nested(rc, "base_url", default="http://localhost:4000"),
            timeout=float(_get_nested(rc, "timeout", default=10.0)),
        )


# ============================================================
# Display
# ============================================================

@dataclass
class DisplayConfig:
    """Overlay window settings."""
    enabled: bool = True
    window_name: str = "Face Recognition"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DisplayConfig":
        """Create from config dictionary."""
        dc = _get_nested(config, "display") or {}

        return cls(
            enabled=bool(_get_nested(dc, "enabled", default=True)),
            window_name=_get_nested(dc, "window_name", default="Face Recognition"),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file."""
        self._config = load_config(config_path)
        self._sections: Dict[type, Any] = {}

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file and drop cached sections."""
        self._load(config_path)

    def _section(self, section_cls):
        if section_cls not in self._sections:
            self._sections[section_cls] = section_cls.from_config(self._config)
        return self._sections[section_cls]

    @property
    def recognition(self) -> RecognitionConfig:
        return self._section(RecognitionConfig)

    @property
    def scheduler(self) -> SchedulerConfig:
        return self._section(SchedulerConfig)

    @property
    def enrollment(self) -> EnrollmentConfig:
        return self._section(EnrollmentConfig)

    @property
    def detector(self) -> DetectorConfig:
        return self._section(DetectorConfig)

    @property
    def camera(self) -> CameraConfig:
        return self._section(CameraConfig)

    @property
    def reporting(self) -> ReportingConfig:
        return self._section(ReportingConfig)

    @property
    def display(self) -> DisplayConfig:
        return self._section(DisplayConfig)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
