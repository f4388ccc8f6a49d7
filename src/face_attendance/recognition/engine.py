"""Per-cycle recognition: match, aggregate, deduplicate."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..constants import RecognitionConfig
from ..detection import DetectedFace
from .attributes import AttributeAggregator
from .dedup import SessionDedupState, SessionDedupTracker
from .matcher import RecognitionMatcher
from .registry import LabelRegistry
from .types import RecognitionResult

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Everything one recognition cycle hands to the sinks."""

    cycle: int
    results: List[RecognitionResult]
    # Labels recognized for the first time this session, in face order
    newly_recognized: List[str]
    state: SessionDedupState
    timestamp: float = field(default_factory=time.time)
    frame: Optional[np.ndarray] = None

    @property
    def face_count(self) -> int:
        return len(self.results)

    @property
    def matched(self) -> List[RecognitionResult]:
        return [result for result in self.results if result.is_matched]


class RecognitionEngine:
    """Turns one cycle's detected faces into recognition results.

    The engine holds no cycle-to-cycle state of its own. The session's
    SessionDedupState is passed in and returned in the CycleReport.
    """

    def __init__(
        self,
        registry: LabelRegistry,
        matcher: Optional[RecognitionMatcher] = None,
        aggregator: Optional[AttributeAggregator] = None,
        tracker: Optional[SessionDedupTracker] = None,
    ):
        self.registry = registry
        self.matcher = matcher or RecognitionMatcher()
        self.aggregator = aggregator or AttributeAggregator()
        self.tracker = tracker or SessionDedupTracker()

    @classmethod
    def from_config(cls, registry: LabelRegistry, config: RecognitionConfig) -> "RecognitionEngine":
        """Create an engine with matcher and aggregator taken from config."""
        return cls(
            registry,
            matcher=RecognitionMatcher(
                threshold=config.match_threshold,
                descriptor_strategy=config.descriptor_strategy,
                descriptor_dim=config.descriptor_dim,
            ),
            aggregator=AttributeAggregator(config.expression_vocabulary),
        )

    def recognize(self, face: DetectedFace) -> RecognitionResult:
        """Match one face and attach its dominant expression."""
        result = self.matcher.match(face, self.registry.candidates())
        result.dominant_expression = self.aggregator.dominant(face.expressions)
        return result

    def process(
        self,
        faces: Sequence[DetectedFace],
        state: SessionDedupState,
        cycle: int = 0,
        frame: Optional[np.ndarray] = None,
    ) -> CycleReport:
        """Run one cycle over all detected faces.

        Args:
            faces: Faces detected in this cycle's frame, in detector order
            state: The session's dedup state, updated in place
            cycle: Cycle number for the report
            frame: Frame the faces came from, passed through to sinks

        Returns:
            CycleReport with one result per face, in the same order
        """
        timestamp = time.time()
        results = []
        newly_recognized = []

        for face in faces:
            result = self.recognize(face)
            result.timestamp = timestamp
            results.append(result)

            if self.tracker.observe(result, state):
                newly_recognized.append(result.label)

        logger.debug(
            f"Cycle {cycle}: {len(results)} faces, "
            f"{sum(r.is_matched for r in results)} matched, "
            f"{len(newly_recognized)} new"
        )

        return CycleReport(
            cycle=cycle,
            results=results,
            newly_recognized=newly_recognized,
            state=state,
            timestamp=timestamp,
            frame=frame,
        )
