"""
Identification Orchestration Service

Owns the lifecycle of the primary classifier and routes each
identification request:

1. Load (once): primary network → READY_PRIMARY, or READY_FALLBACK on failure
2. Primary path: forward pass, optionally mapped to a catalog species
3. Heuristic path: colour features → category scores → weighted selection

```
identify(image)
     |
  load() ── shared task, one attempt per service
     |
 ┌───▼────────────┐   failure / unmapped label
 │ READY_PRIMARY  │───────────────┐
 │ primary.predict│               │
 └───┬────────────┘               │
     |                    ┌───────▼──────┐
     |                    │ extract      │
     |   READY_FALLBACK ─▶│ score        │
     |                    │ select       │
     |                    └───────┬──────┘
     ▼                            ▼
        IdentificationResult(species | None, confidence)
```

Nothing here raises to the caller. Load failures are sticky for the
lifetime of the service; per-request inference failures only affect that
request.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import numpy as np
from PIL import Image

from app.core.config import Settings
from app.ml.base import BaseMLComponent, PrimaryPrediction
from app.ml.feature_extractor import ColorFeatureExtractor
from app.ml.heuristic_scorer import HeuristicSpeciesScorer
from app.ml.weighted_selector import WeightedSelector
from app.models.enums import ClassifierState, IdentificationSource
from app.models.schemas import SpeciesRecord
from app.services.species_catalog import SpeciesCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentificationResult:
    """
    Outcome of one identification.

    `species` is None when nothing could be identified, in which case
    `confidence` is 0.
    """
    species: Optional[SpeciesRecord]
    confidence: float
    source: IdentificationSource = IdentificationSource.NONE
    metadata: dict = field(default_factory=dict, compare=False)

    @classmethod
    def none(cls, **metadata: Any) -> "IdentificationResult":
        return cls(species=None, confidence=0.0, metadata=metadata)


class IdentificationService:
    """
    Lifecycle manager and request router for species identification.

    Construct one per process in the composition root and share it.

    Usage:
        service = IdentificationService(catalog, primary=PrimaryClassifierAdapter())
        await service.load()          # optional pre-load
        result = await service.identify(pil_image)
    """

    def __init__(
        self,
        catalog: SpeciesCatalog,
        primary: Optional[BaseMLComponent] = None,
        settings: Optional[Settings] = None,
        extractor: Optional[ColorFeatureExtractor] = None,
        scorer: Optional[HeuristicSpeciesScorer] = None,
        selector: Optional[WeightedSelector] = None,
    ):
        """
        Initialize the service with its components.

        Components can be injected for testing or replaced with
        alternative implementations. Without a primary component the
        service always runs in fallback mode.
        """
        self.settings = settings or Settings()
        self.catalog = catalog
        self.primary = primary if self.settings.enable_primary_model else None

        rng = np.random.default_rng(self.settings.random_seed)
        self.extractor = extractor or ColorFeatureExtractor(self.settings.sample_window)
        self.scorer = scorer or HeuristicSpeciesScorer(rng=rng)
        self.selector = selector or WeightedSelector(rng=rng)

        self._state = ClassifierState.UNINITIALIZED
        self._load_task: Optional[asyncio.Task] = None
        self.load_attempts = 0

    # === Lifecycle ===

    @property
    def state(self) -> ClassifierState:
        return self._state

    def is_loaded(self) -> bool:
        """True once a load attempt has resolved, in either ready state."""
        return self._state in (ClassifierState.READY_PRIMARY, ClassifierState.READY_FALLBACK)

    def is_fallback(self) -> bool:
        """True when the heuristic classifier is used exclusively."""
        return self._state == ClassifierState.READY_FALLBACK

    async def load(self) -> None:
        """
        Load the primary classifier, at most once.

        Concurrent callers share the in-flight attempt. Never raises: a
        failed attempt leaves the service in READY_FALLBACK.
        """
        if self.is_loaded():
            return

        if self._load_task is None:
            self._state = ClassifierState.LOADING
            self._load_task = asyncio.ensure_future(self._load_once())

        # Shielded so a cancelled caller does not cancel the shared attempt
        await asyncio.shield(self._load_task)

    async def _load_once(self) -> None:
        self.load_attempts += 1

        if self.primary is None:
            logger.info("Primary classifier disabled; using heuristic classifier")
            self._state = ClassifierState.READY_FALLBACK
            return

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.primary.ensure_loaded)
        except Exception as e:
            logger.error(f"Failed to load primary classifier, falling back to heuristic: {e}")
            self._state = ClassifierState.READY_FALLBACK
            return

        self._state = ClassifierState.READY_PRIMARY
        logger.info("Primary classifier ready")

    # === Identification ===

    async def identify(self, image: Optional[Image.Image]) -> IdentificationResult:
        """
        Identify the species in a decoded image.

        Loads the classifier first if needed. Never raises; unexpected
        failures produce a result with no species and zero confidence.

        Args:
            image: Decoded PIL Image; None or corrupt images are tolerated

        Returns:
            IdentificationResult
        """
        try:
            await self.load()

            if self._state == ClassifierState.READY_PRIMARY:
                result = await self._identify_primary(image)
            else:
                result = self._identify_heuristic(image)

        except Exception as e:
            logger.exception(f"Identification failed: {e}")
            return IdentificationResult.none(error=str(e))

        if result.species is not None:
            logger.info(
                f"Identified {result.species.name} ({result.confidence:.2%}) "
                f"via {result.source.value}"
            )
        else:
            logger.info("No species identified")
        return result

    async def _identify_primary(self, image: Optional[Image.Image]) -> IdentificationResult:
        """Primary forward pass; any failure falls back for this request only."""
        try:
            loop = asyncio.get_running_loop()
            primary_result = await loop.run_in_executor(None, self.primary.predict, image)
        except Exception as e:
            logger.warning(f"Primary inference failed, using heuristic for this request: {e}")
            return self._identify_heuristic(image, primary_error=str(e))

        prediction: PrimaryPrediction = primary_result.prediction
        primary_info = {
            "class_index": prediction.class_index,
            "label": prediction.label,
            "raw_probability": round(prediction.raw_probability, 4),
            "latency_ms": round(primary_result.latency_ms, 2),
        }

        species = self._map_label(prediction)
        if species is None:
            logger.debug(
                f"Primary label {prediction.label!r} has no catalog mapping; "
                "selecting species heuristically"
            )
            return self._identify_heuristic(image, primary=primary_info)

        if self.settings.strict_confidence:
            confidence = min(self.settings.confidence_cap, prediction.raw_probability)
        else:
            confidence = self._band_confidence(prediction.raw_probability)

        return IdentificationResult(
            species=species,
            confidence=confidence,
            source=IdentificationSource.PRIMARY,
            metadata={"primary": primary_info}
        )

    def _map_label(self, prediction: PrimaryPrediction) -> Optional[SpeciesRecord]:
        """Resolve a primary label through the configured label map."""
        if not prediction.label or not self.settings.label_map:
            return None

        species_id = self.settings.label_map.get(prediction.label)
        if species_id is None:
            return None

        species = self.catalog.get(species_id)
        if species is None:
            logger.warning(
                f"Label map points {prediction.label!r} at unknown species {species_id!r}"
            )
        return species

    def _identify_heuristic(
        self,
        image: Optional[Image.Image],
        **metadata: Any,
    ) -> IdentificationResult:
        """Colour features → category scores → weighted selection."""
        profile = self.extractor.extract(image)
        entries = self.scorer.score(profile, self.catalog)

        candidates = [e for e in entries if e.weight >= self.settings.min_candidate_weight]
        metadata["color_profile"] = asdict(profile)

        if not candidates:
            logger.info(
                f"No candidate cleared minimum weight {self.settings.min_candidate_weight}"
            )
            return IdentificationResult.none(**metadata)

        index = self.selector.select(candidates, population=len(self.catalog))
        if index is None:
            return IdentificationResult.none(**metadata)

        weight = next((e.weight for e in candidates if e.index == index), 0.0)
        if self.settings.strict_confidence:
            total = sum(e.weight for e in candidates)
            confidence = self.selector.share_confidence(
                weight, total, cap=self.settings.confidence_cap
            )
        else:
            confidence = self._band_confidence(weight)

        return IdentificationResult(
            species=self.catalog[index],
            confidence=confidence,
            source=IdentificationSource.HEURISTIC,
            metadata=metadata
        )

    def _band_confidence(self, weight: float) -> float:
        return self.selector.confidence(
            weight,
            floor=self.settings.confidence_floor,
            span=self.settings.confidence_span,
            cap=self.settings.confidence_cap,
        )

    # === Status ===

    def get_status(self) -> dict:
        """Snapshot of the classifier state for health checks."""
        status = {
            "state": self._state.value,
            "is_loaded": self.is_loaded(),
            "is_fallback": self.is_fallback(),
            "load_attempts": self.load_attempts,
            "primary_enabled": self.primary is not None,
            "catalog": self.catalog.get_metadata(),
        }

        if self._state == ClassifierState.READY_PRIMARY:
            info = self.primary.get_model_info()
            status["primary_model"] = {
                "version": info.version,
                "architecture": info.architecture,
                "num_classes": info.num_classes,
            }

        return status
