"""Overlay rendering of recognition results with OpenCV."""

import logging
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from ..recognition import CycleReport, RecognitionResult
from .base import BaseResultSink

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

MATCHED_COLOR: Color = (0, 255, 0)
UNKNOWN_COLOR: Color = (0, 0, 255)
LANDMARK_COLOR: Color = (255, 200, 0)


def draw_result(
    image: np.ndarray,
    result: RecognitionResult,
    thickness: int = 2,
    show_landmarks: bool = True,
) -> None:
    """Draw one result's box, landmarks and label onto image in place."""
    color = MATCHED_COLOR if result.is_matched else UNKNOWN_COLOR
    x, y, w, h = result.bbox

    cv2.rectangle(image, (x, y), (x + w, y + h), color, thickness)

    if show_landmarks:
        for lx, ly in result.landmarks:
            cv2.circle(image, (int(lx), int(ly)), 1, LANDMARK_COLOR, -1)

    label = result.identity
    if result.dominant_expression:
        label = f"{label} ({result.dominant_expression})"

    cv2.putText(
        image, label,
        (x, max(y - 10, 10)),
        cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2,
    )


def render(frame: np.ndarray, report: CycleReport, show_landmarks: bool = True) -> np.ndarray:
    """Return a copy of frame with every result of the cycle drawn on it."""
    output = frame.copy()
    for result in report.results:
        draw_result(output, result, show_landmarks=show_landmarks)
    return output


class OverlaySink(BaseResultSink):
    """Draws each cycle's results on its frame and optionally shows it."""

    def __init__(
        self,
        window_name: str = "Face Recognition",
        show: bool = True,
        on_quit: Optional[Callable[[], None]] = None,
    ):
        """Initialize overlay sink.

        Args:
            window_name: OpenCV window title
            show: Display frames in a window; if False only keep the last render
            on_quit: Called when 'q' is pressed in the window
        """
        self.window_name = window_name
        self.show = show
        self.on_quit = on_quit
        self.last_render: Optional[np.ndarray] = None
        self._window_open = False

    async def handle(self, report: CycleReport) -> None:
        if report.frame is None:
            return

        self.last_render = render(report.frame, report)

        if not self.show:
            return

        cv2.imshow(self.window_name, self.last_render)
        self._window_open = True

        key = cv2.waitKey(1) & 0xFF
        if key == ord("q") and self.on_quit is not None:
            logger.info("Quit requested from overlay window")
            self.on_quit()

    async def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
