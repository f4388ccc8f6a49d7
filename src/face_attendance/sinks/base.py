"""Result sink interface and dispatcher."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from ..recognition import CycleReport

logger = logging.getLogger(__name__)


class BaseResultSink(ABC):
    """Abstract base class for consumers of cycle reports."""

    @abstractmethod
    async def handle(self, report: CycleReport) -> None:
        """Consume the results of one cycle.

        Args:
            report: Cycle report with every face's result
        """
        pass

    async def close(self) -> None:
        """Release resources held by the sink."""


class SinkManager:
    """Manages multiple result sinks."""

    def __init__(self):
        """Initialize sink manager."""
        self.sinks: List[BaseResultSink] = []

    def add_sink(self, sink: BaseResultSink) -> None:
        """Add a sink. Sinks run in the order they are added."""
        self.sinks.append(sink)

    async def dispatch(self, report: CycleReport) -> Dict[str, bool]:
        """Hand a report to every sink.

        A failing sink is logged and skipped; the remaining sinks still run.

        Returns:
            Dictionary of sink type to success status
        """
        results = {}

        for sink in self.sinks:
            sink_name = sink.__class__.__name__
            try:
                await sink.handle(report)
                results[sink_name] = True
            except Exception:
                logger.exception(f"Error in {sink_name} on cycle {report.cycle}")
                results[sink_name] = False

        return results

    async def close(self) -> None:
        """Close every sink."""
        for sink in self.sinks:
            try:
                await sink.close()
            except Exception:
                logger.exception(f"Error closing {sink.__class__.__name__}")
