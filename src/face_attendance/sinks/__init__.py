"""Consumers of per-cycle recognition results."""

from .base import BaseResultSink, SinkManager
from .attendance import AttendanceReporter, AttendanceSink
from .log import LogSink
from .overlay import OverlaySink, draw_result, render

__all__ = [
    "BaseResultSink",
    "SinkManager",
    "AttendanceReporter",
    "AttendanceSink",
    "LogSink",
    "OverlaySink",
    "draw_result",
    "render",
]
