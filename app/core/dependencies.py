"""
FastAPI dependency injection.

This is the composition root: it builds the catalog, the classifier
components and the single IdentificationService shared by all requests.
Tests swap components through `app.dependency_overrides`.
"""

from functools import lru_cache

from app.core.config import get_settings
from app.ml.preprocessor import ImagePreprocessor
from app.ml.species_classifier import PrimaryClassifierAdapter
from app.services.identification_service import IdentificationService
from app.services.species_catalog import SpeciesCatalog


@lru_cache()
def get_preprocessor() -> ImagePreprocessor:
    """Get cached image preprocessor."""
    return ImagePreprocessor()


@lru_cache()
def get_species_catalog() -> SpeciesCatalog:
    """Get the species catalog, loaded once."""
    return SpeciesCatalog.load(get_settings().catalog_path)


@lru_cache()
def get_identification_service() -> IdentificationService:
    """Get the shared identification service."""
    settings = get_settings()

    primary = None
    if settings.enable_primary_model:
        primary = PrimaryClassifierAdapter(
            model_id=settings.model_id,
            device=settings.device,
            cache_dir=settings.model_cache_dir,
            preprocessor=get_preprocessor(),
        )

    return IdentificationService(
        catalog=get_species_catalog(),
        primary=primary,
        settings=settings,
    )


__all__ = [
    "get_preprocessor",
    "get_species_catalog",
    "get_identification_service",
]
