"""
Heuristic species scoring.

Stand-in feature-to-label mapping used when the primary network is
unavailable, or when its label space does not line up with the catalog.
Each species gets an unnormalized weight from simple colour cues tied to
its category, plus a small random jitter.

Category cues:
- spider: dark image (+3), red-dominant image (+3)
- snake: more red than blue, i.e. brown/tan (+2)
- other (lizards): more green than red (+2)
"""

from dataclasses import dataclass
from typing import Iterable, Optional
import logging

import numpy as np

from app.ml.feature_extractor import ColorProfile
from app.models.enums import Category
from app.models.schemas import SpeciesRecord

logger = logging.getLogger(__name__)


@dataclass
class ScoreEntry:
    """Weight of one catalog entry for a single identification."""
    index: int
    weight: float


class HeuristicSpeciesScorer:
    """
    Scores every catalog entry against a ColorProfile.

    Usage:
        scorer = HeuristicSpeciesScorer(rng=np.random.default_rng(7))
        entries = scorer.score(profile, catalog)
    """

    BASE_WEIGHT = 1.0
    DARK_THRESHOLD = 100

    SPIDER_DARK_BONUS = 3.0
    SPIDER_RED_BONUS = 3.0
    SNAKE_BROWN_BONUS = 2.0
    LIZARD_GREEN_BONUS = 2.0

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def score(
        self,
        profile: ColorProfile,
        catalog: Iterable[SpeciesRecord],
    ) -> list[ScoreEntry]:
        """
        Weight each catalog entry.

        Args:
            profile: Colour descriptor of the image
            catalog: Species in catalog order

        Returns:
            One ScoreEntry per catalog entry, in catalog order
        """
        entries = []
        for index, species in enumerate(catalog):
            weight = self.BASE_WEIGHT + self.category_bonus(profile, species.category)
            weight += float(self.rng.random())
            entries.append(ScoreEntry(index=index, weight=weight))

        logger.debug(
            f"Heuristic scores for {profile}: "
            f"{[round(e.weight, 3) for e in entries]}"
        )
        return entries

    def category_bonus(self, profile: ColorProfile, category: Category) -> float:
        """Deterministic part of the weight contributed by colour cues."""
        bonus = 0.0

        if category == Category.SPIDER:
            if profile.average < self.DARK_THRESHOLD:
                bonus += self.SPIDER_DARK_BONUS
            if profile.r > profile.g and profile.r > profile.b:
                bonus += self.SPIDER_RED_BONUS
        elif category == Category.SNAKE:
            if profile.r > profile.b:
                bonus += self.SNAKE_BROWN_BONUS
        elif category == Category.OTHER:
            if profile.g > profile.r:
                bonus += self.LIZARD_GREEN_BONUS

        return bonus
