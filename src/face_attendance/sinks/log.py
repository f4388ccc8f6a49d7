"""Logging sink for per-cycle recognition output."""

import logging
from datetime import datetime

from ..recognition import CycleReport, RecognitionResult
from .base import BaseResultSink

logger = logging.getLogger(__name__)


def describe(result: RecognitionResult) -> str:
    """One-line summary of a result."""
    age = "?" if result.age is None else f"{result.age:.0f}"
    gender = result.gender or "?"
    expression = result.dominant_expression or "?"
    time_of_day = datetime.fromtimestamp(result.timestamp).strftime("%H:%M:%S")
    return (
        f"ID: {result.identity}, (Gender: {gender}, Age: {age}, "
        f"Expression: {expression}) at {time_of_day}"
    )


class LogSink(BaseResultSink):
    """Logs every face each cycle and the session's recognized labels."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    async def handle(self, report: CycleReport) -> None:
        for result in report.results:
            logger.log(self.level, describe(result))

        if report.newly_recognized:
            logger.info(f"Detected IDs: {report.state.in_order()}")
