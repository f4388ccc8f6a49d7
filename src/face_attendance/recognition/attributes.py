"""Reduction of per-face attribute distributions to a single label."""

from typing import Iterator, Mapping, Optional, Sequence, Tuple

from ..constants import DEFAULT_EXPRESSION_VOCABULARY


class AttributeAggregator:
    """Picks the dominant attribute of a probability distribution.

    Entries are visited in vocabulary order, then any entries outside the
    vocabulary in mapping order. The maximum is replaced only on a strictly
    greater probability, so the first attribute reaching it wins ties.
    """

    def __init__(self, vocabulary: Sequence[str] = DEFAULT_EXPRESSION_VOCABULARY):
        self.vocabulary = tuple(vocabulary)

    def ordered(self, distribution: Mapping[str, float]) -> Iterator[Tuple[str, float]]:
        """Iterate a distribution in vocabulary order."""
        for name in self.vocabulary:
            if name in distribution:
                yield name, distribution[name]
        for name, probability in distribution.items():
            if name not in self.vocabulary:
                yield name, probability

    def dominant(self, distribution: Mapping[str, float]) -> Optional[str]:
        """Return the highest-probability attribute, None if empty."""
        best_name = None
        best_probability = None

        for name, probability in self.ordered(distribution):
            if best_probability is None or probability > best_probability:
                best_name = name
                best_probability = probability

        return best_name
