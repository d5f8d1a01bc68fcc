"""
Enumerations for the wildlife identification system.

These enums provide type safety and clear documentation of valid values.
"""

from enum import Enum


class Category(str, Enum):
    """Broad animal group a catalog species belongs to."""
    SNAKE = "snake"
    SPIDER = "spider"
    INSECT = "insect"
    MAMMAL = "mammal"
    BIRD = "bird"
    OTHER = "other"  # Reptiles other than snakes, e.g. lizards


class DangerLevel(str, Enum):
    """Danger posed to people, ordered by severity."""
    HARMLESS = "harmless"
    CAUTION = "caution"
    DANGEROUS = "dangerous"
    LETHAL = "lethal"

    @property
    def severity(self) -> int:
        """Numeric rank, 0 for harmless up to 3 for lethal."""
        return list(DangerLevel).index(self)

    @property
    def requires_warning(self) -> bool:
        """Whether an identification should be surfaced as a warning."""
        return self.severity >= DangerLevel.DANGEROUS.severity


class ClassifierState(str, Enum):
    """Lifecycle state of the identification service's model."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY_PRIMARY = "ready_primary"
    READY_FALLBACK = "ready_fallback"


class IdentificationSource(str, Enum):
    """Which path produced an identification result."""
    PRIMARY = "primary"
    HEURISTIC = "heuristic"
    NONE = "none"


class ConfidenceLevel(str, Enum):
    """Human-readable confidence levels for clients."""
    VERY_HIGH = "very_high"      # >= 0.95
    HIGH = "high"                # >= 0.85
    MODERATE = "moderate"        # >= 0.70
    LOW = "low"                  # >= 0.50
    VERY_LOW = "very_low"        # < 0.50

    @classmethod
    def from_score(cls, score: float) -> "ConfidenceLevel":
        """Convert a numeric confidence score to a level."""
        if score >= 0.95:
            return cls.VERY_HIGH
        elif score >= 0.85:
            return cls.HIGH
        elif score >= 0.70:
            return cls.MODERATE
        elif score >= 0.50:
            return cls.LOW
        else:
            return cls.VERY_LOW
