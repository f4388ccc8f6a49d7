"""Recognition session: startup, the per-cycle pipeline, and shutdown."""

import asyncio
import logging
from typing import List, Optional, Sequence

import numpy as np

from .detection import BaseFaceDetector, DetectedFace
from .errors import AcquisitionError, DetectionError, ModelReadinessError
from .recognition import CycleReport, LabelRegistry, RecognitionEngine, SessionDedupState
from .scheduler import CycleScheduler
from .sensors import BaseCameraInterface
from .sinks import BaseResultSink, SinkManager

logger = logging.getLogger(__name__)


class RecognitionSession:
    """Owns the camera, detector, engine and sinks for one live session.

    Startup order is camera, then detector, then the first cycle. Each cycle
    captures a frame, detects faces off the event loop, runs the engine and
    hands the report to the sinks. Capture and detection failures produce
    an empty cycle. A detector call that exceeds `detector_timeout` skips
    the cycle, and so does every following tick until that call returns.
    """

    def __init__(
        self,
        camera: BaseCameraInterface,
        detector: BaseFaceDetector,
        engine: RecognitionEngine,
        sinks: Sequence[BaseResultSink] = (),
        interval: float = 1.0,
        detector_timeout: Optional[float] = 5.0,
    ):
        """Initialize recognition session.

        Args:
            camera: Live video source
            detector: Detector used on every frame
            engine: Engine built around the enrolled registry
            sinks: Result consumers, called in order each cycle
            interval: Seconds between cycles
            detector_timeout: Seconds a detection may take, None for no bound
        """
        self.camera = camera
        self.detector = detector
        self.engine = engine
        self.detector_timeout = detector_timeout

        self.sinks = SinkManager()
        for sink in sinks:
            self.sinks.add_sink(sink)

        self.state = SessionDedupState()
        self.last_report: Optional[CycleReport] = None
        self.scheduler = CycleScheduler(self.run_cycle, interval=interval)

        self._started = False
        self._stop_lock = asyncio.Lock()
        self._overrun: Optional[asyncio.Future] = None
        self._stop_task: Optional[asyncio.Task] = None

    @property
    def registry(self) -> LabelRegistry:
        return self.engine.registry

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    async def start(self) -> None:
        """Acquire the camera, ready the detector and start cycling.

        Raises:
            AcquisitionError: If the camera cannot be opened
            ModelReadinessError: If the detector cannot load its models
        """
        if self._started:
            return

        await asyncio.to_thread(self.camera.start)

        try:
            await asyncio.to_thread(self.detector.prepare)
        except ModelReadinessError:
            await asyncio.to_thread(self.camera.stop)
            raise

        if len(self.registry) == 0:
            logger.warning("No identities enrolled; every face will be Unknown")

        self.state = SessionDedupState()
        self._started = True
        self.scheduler.start()
        logger.info(f"Session started with {len(self.registry)} enrolled identities")

    async def stop(self) -> None:
        """Stop after the in-flight cycle and release every resource."""
        async with self._stop_lock:
            if not self._started:
                return

            await self.scheduler.stop()
            await self.sinks.close()

            if self._overrun is not None and not self._overrun.done():
                logger.info("Waiting for overrunning detection to return")
                await asyncio.wait([self._overrun])

            await asyncio.to_thread(self.camera.stop)
            self.detector.close()
            self._started = False
            logger.info(f"Session stopped; recognized {self.state.in_order()}")

    def request_stop(self) -> None:
        """Ask the session to stop from a synchronous callback.

        The stop task is kept so that `wait()` and `__aexit__` can await it
        and surface its errors.
        """
        if self._stop_task is None:
            self._stop_task = asyncio.get_running_loop().create_task(self.stop())

    async def wait(self) -> None:
        """Wait until the scheduler stops and any requested stop completes."""
        await self.scheduler.wait()
        await self._join_stop_task()

    async def _join_stop_task(self) -> None:
        task = self._stop_task
        if task is not None and task is not asyncio.current_task():
            self._stop_task = None
            await task

    async def __aenter__(self) -> "RecognitionSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            await self._join_stop_task()
        finally:
            await self.stop()

    async def run_cycle(self, cycle: int) -> Optional[CycleReport]:
        """Run one capture-detect-recognize-dispatch cycle.

        Returns:
            The cycle report, or None if the cycle was skipped
        """
        if self._overrun is not None:
            if not self._overrun.done():
                logger.debug(f"Cycle {cycle}: previous detection still running, skipping")
                return None
            self._overrun = None

        try:
            frame = await asyncio.to_thread(self.camera.capture)
        except AcquisitionError as e:
            logger.error(f"Cycle {cycle}: {e}")
            frame = None

        faces: List[DetectedFace] = []
        if frame is not None:
            detection = asyncio.ensure_future(asyncio.to_thread(self._detect_frame, frame))
            try:
                faces = await asyncio.wait_for(
                    asyncio.shield(detection), timeout=self.detector_timeout
                )
            except asyncio.TimeoutError:
                self._overrun = detection
                logger.warning(
                    f"Cycle {cycle}: detector exceeded {self.detector_timeout}s, skipping"
                )
                return None

        report = self.engine.process(faces, self.state, cycle=cycle, frame=frame)
        self.state = report.state
        self.last_report = report

        await self.sinks.dispatch(report)
        return report

    def _detect_frame(self, frame: np.ndarray) -> List[DetectedFace]:
        try:
            return self.detector.detect(frame)
        except DetectionError as e:
            logger.error(f"Detection failed: {e}")
            return []
