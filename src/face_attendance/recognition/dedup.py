"""Session-scoped tracking of which labels have been announced."""

import logging
from typing import FrozenSet, Iterable, Iterator, List

from .types import RecognitionResult

logger = logging.getLogger(__name__)


class SessionDedupState:
    """Labels already reported as newly recognized in this session.

    Grows monotonically: there is no way to remove a label. A new session
    starts with a new instance.
    """

    def __init__(self, labels: Iterable[str] = ()):
        self._order: List[str] = []
        self._labels = set()
        for label in labels:
            self.add(label)

    def add(self, label: str) -> bool:
        """Add a label. Returns True if it was not present."""
        if label in self._labels:
            return False
        self._labels.add(label)
        self._order.append(label)
        return True

    @property
    def labels(self) -> FrozenSet[str]:
        return frozenset(self._labels)

    def in_order(self) -> List[str]:
        """Labels in the order they were first recognized."""
        return list(self._order)

    def __contains__(self, label: str) -> bool:
        return label in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __repr__(self) -> str:
        return f"SessionDedupState({self._order!r})"


class SessionDedupTracker:
    """Decides whether a recognition result is a first sighting."""

    def observe(self, result: RecognitionResult, state: SessionDedupState) -> bool:
        """Record a result against the session state.

        Only matched results participate; unknown faces never touch the
        state and are never newly recognized.

        Returns:
            True if the result's label was seen for the first time
        """
        if not result.is_matched:
            return False

        is_new = state.add(result.label)
        if is_new:
            logger.info(f"Recognized: {result.label}")
        return is_new
