"""Camera interface module.

Provides the live video source the recognition session samples from.
"""

import logging
from abc import ABC, abstractmethod
from typing import Tuple

import cv2
import numpy as np

from ..errors import AcquisitionError

logger = logging.getLogger(__name__)


class BaseCameraInterface(ABC):
    """Abstract base class for camera interfaces."""

    @abstractmethod
    def start(self) -> None:
        """Start the camera.

        Raises:
            AcquisitionError: If the camera cannot be opened
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the camera and release the device."""
        pass

    @abstractmethod
    def capture(self) -> np.ndarray:
        """Capture a single frame.

        Returns:
            BGR image as numpy array
        """
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()


class OpenCVCamera(BaseCameraInterface):
    """Camera interface using OpenCV VideoCapture."""

    def __init__(
        self,
        device_id: int = 0,
        resolution: Tuple[int, int] = (940, 650),
        fps: int = 30,
    ):
        """Initialize OpenCV camera.

        Args:
            device_id: Camera device ID
            resolution: Frame resolution (width, height)
            fps: Target frames per second
        """
        self.device_id = device_id
        self.resolution = resolution
        self.fps = fps
        self.cap = None

    @property
    def is_running(self) -> bool:
        return self.cap is not None

    def start(self) -> None:
        """Start the camera."""
        if self.cap is not None:
            return

        cap = cv2.VideoCapture(self.device_id)
        if not cap.isOpened():
            cap.release()
            raise AcquisitionError(f"Failed to open camera {self.device_id}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
        cap.set(cv2.CAP_PROP_FPS, self.fps)

        self.cap = cap
        logger.info("video recording started")

    def stop(self) -> None:
        """Stop the camera."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Released camera {self.device_id}")

    def capture(self) -> np.ndarray:
        """Capture a single frame."""
        if self.cap is None:
            raise AcquisitionError("Camera not started")

        ret, frame = self.cap.read()
        if not ret:
            raise AcquisitionError("Failed to capture frame")

        return frame
