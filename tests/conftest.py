"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from face_attendance.detection import BaseFaceDetector, DetectedFace  # noqa: E402
from face_attendance.errors import AcquisitionError, ModelReadinessError  # noqa: E402
from face_attendance.recognition import LabelRegistry, ReferenceIdentity  # noqa: E402
from face_attendance.sensors import BaseCameraInterface  # noqa: E402


def axis_vector(axis: Optional[int] = None, value: float = 0.0, dim: int = 128) -> np.ndarray:
    """Zero vector with `value` on one axis; its distance to zero is exactly |value|."""
    vector = np.zeros(dim, dtype=np.float64)
    if axis is not None:
        vector[axis] = value
    return vector


class StubDetector(BaseFaceDetector):
    """Detector returning preset faces, keyed by the frame's first pixel."""

    def __init__(
        self,
        faces_by_key: Optional[Dict[int, List[DetectedFace]]] = None,
        default: Optional[List[DetectedFace]] = None,
        name: str = "stub",
        fail_prepare: bool = False,
        error: Optional[Exception] = None,
    ):
        self.faces_by_key = faces_by_key or {}
        self.default = default or []
        self._name = name
        self.fail_prepare = fail_prepare
        self.error = error
        self.prepared = False
        self.closed = False
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def prepare(self) -> None:
        if self.fail_prepare:
            raise ModelReadinessError("model missing")
        self.prepared = True

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        key = int(image.flat[0])
        return list(self.faces_by_key.get(key, self.default))

    def close(self) -> None:
        self.closed = True


class StubCamera(BaseCameraInterface):
    """Camera serving a fixed frame."""

    def __init__(self, frame: Optional[np.ndarray] = None, fail_start: bool = False):
        self.frame = frame if frame is not None else np.zeros((60, 80, 3), dtype=np.uint8)
        self.fail_start = fail_start
        self.fail_capture = False
        self._running = False
        self.stop_calls = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self.fail_start:
            raise AcquisitionError("no camera")
        self._running = True

    def stop(self) -> None:
        self.stop_calls += 1
        self._running = False

    def capture(self) -> np.ndarray:
        if self.fail_capture:
            raise AcquisitionError("Failed to capture frame")
        return self.frame


def make_face(descriptor: Optional[np.ndarray], expressions=None, x: int = 10) -> DetectedFace:
    return DetectedFace(
        x=x, y=20, width=30, height=40,
        descriptor=descriptor,
        landmarks=[(x + 5, 25), (x + 20, 25)],
        expressions=expressions or {},
        age=31.6,
        gender="female",
    )


@pytest.fixture
def abc_registry():
    """Registry with A, B, C enrolled on separate axes."""
    return LabelRegistry([
        ReferenceIdentity("A", (axis_vector(1, 0.9),)),
        ReferenceIdentity("B", (axis_vector(0, 0.30),)),
        ReferenceIdentity("C", (axis_vector(2, 0.7),)),
    ])


@pytest.fixture
def sample_image():
    """Create a sample test image."""
    return np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        "recognition": {
            "match_threshold": 0.5,
            "descriptor_dim": 64,
            "descriptor_strategy": "all",
            "expression_vocabulary": ["happy", "sad"],
        },
        "scheduler": {
            "interval": 0.5,
            "detector_timeout": 2.0,
        },
        "enrollment": {
            "labels_dir": "faces",
            "labels": ["alice", "bob"],
            "detector_variants": ["hog"],
        },
        "camera": {
            "device_id": 1,
            "resolution": [640, 480],
            "fps": 15,
        },
        "reporting": {
            "enabled": False,
            "base_url": "http://attendance.local:4000/",
        },
    }
