"""
Weighted (roulette-wheel) selection and confidence policy.

Selection draws an entry with probability proportional to its weight; it
never collapses to a hard argmax.

Two confidence policies are provided:
- confidence(): sampled independently of the weights within a narrow, high
  band. Downstream clients calibrate their thresholds to this band.
- share_confidence(): the winning weight's share of the total weight, for
  deployments that need confidence to track the evidence.
"""

from typing import Optional, Sequence
import logging

import numpy as np

from app.ml.heuristic_scorer import ScoreEntry

logger = logging.getLogger(__name__)


class WeightedSelector:
    """
    Proportional random selection over ScoreEntry weights.

    Usage:
        selector = WeightedSelector(rng=np.random.default_rng(7))
        index = selector.select(entries, population=len(catalog))
        confidence = selector.confidence(entries[index].weight)
    """

    DEFAULT_FLOOR = 0.70
    DEFAULT_SPAN = 0.25
    DEFAULT_CAP = 0.98

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def select(self, entries: Sequence[ScoreEntry], population: int) -> Optional[int]:
        """
        Pick a catalog index.

        Args:
            entries: Weighted candidates
            population: Catalog size, used for the uniform fallback

        Returns:
            Selected catalog index, or None if there is nothing to select
        """
        total = sum(max(e.weight, 0.0) for e in entries)

        if not entries or total <= 0:
            if population <= 0:
                return None
            index = int(self.rng.integers(0, population))
            logger.debug(f"No usable weights; uniform pick {index} of {population}")
            return index

        u = float(self.rng.random()) * total
        running = 0.0
        last_positive = None
        for entry in entries:
            if entry.weight <= 0:
                continue
            running += entry.weight
            last_positive = entry.index
            if running >= u:
                return entry.index

        # Float rounding can leave running a hair below u
        return last_positive

    def confidence(
        self,
        weight: float,
        floor: float = DEFAULT_FLOOR,
        span: float = DEFAULT_SPAN,
        cap: float = DEFAULT_CAP,
    ) -> float:
        """
        Sample a confidence in [floor, min(cap, floor + span)).

        `weight` is accepted for interface symmetry with share_confidence()
        and does not influence the result.
        """
        return min(cap, floor + float(self.rng.random()) * span)

    @staticmethod
    def share_confidence(weight: float, total: float, cap: float = DEFAULT_CAP) -> float:
        """Confidence as the selected weight's share of the total weight."""
        if total <= 0:
            return 0.0
        return min(cap, max(0.0, weight / total))
