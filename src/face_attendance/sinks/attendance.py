"""Attendance reporting to the HTTP attendance API."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from ..errors import ReportingError
from ..recognition import CycleReport
from .base import BaseResultSink

logger = logging.getLogger(__name__)


class AttendanceReporter:
    """Marks labels present via PUT {base_url}/attendances/{label}.

    Failures are logged and reported through the return value. Nothing is
    retried.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4000",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize attendance reporter.

        Args:
            base_url: Root URL of the attendance API
            timeout: Seconds before a request is abandoned
            client: Shared client; one is created (and owned) if None
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def url_for(self, label: str) -> str:
        return f"{self.base_url}/attendances/{quote(label, safe='')}"

    @staticmethod
    def build_payload(now: Optional[datetime] = None) -> Dict[str, str]:
        """Attendance body stamped with the current UTC date and time."""
        now = now or datetime.now(timezone.utc)
        return {
            "attendance": "1",
            "last_attendance_date": now.strftime("%Y-%m-%d"),
            "last_attendance_time": now.strftime("%H:%M:%S"),
        }

    async def update_attendance(self, label: str, now: Optional[datetime] = None) -> bool:
        """Send one attendance update.

        Returns:
            True if the API answered 200
        """
        url = self.url_for(label)

        try:
            response = await self._client.put(
                url,
                json=self.build_payload(now),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            error = ReportingError(label, f"{e.__class__.__name__}: {e}")
            logger.error(f"Error updating attendance: {error}")
            return False

        if response.status_code != 200:
            error = ReportingError(label, f"HTTP {response.status_code}", response.status_code)
            logger.error(f"Failed to update attendance: {error}")
            return False

        logger.info(f"Attendance for {label} updated successfully")
        return True

    async def aclose(self) -> None:
        """Close the HTTP client if this reporter created it."""
        if self._owns_client:
            await self._client.aclose()


class AttendanceSink(BaseResultSink):
    """Reports each newly recognized label once."""

    def __init__(self, reporter: AttendanceReporter):
        self.reporter = reporter

    async def handle(self, report: CycleReport) -> None:
        for label in report.newly_recognized:
            await self.reporter.update_attendance(label)

    async def close(self) -> None:
        await self.reporter.aclose()
