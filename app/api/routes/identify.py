"""
Identification API endpoints.

- Species identification from a photo
- Catalog listing and lookup
"""

import logging
from fastapi import APIRouter, HTTPException, Depends
from typing import Optional

from app.core.dependencies import (
    get_identification_service,
    get_preprocessor,
    get_species_catalog,
)
from app.ml.preprocessor import ImagePreprocessor
from app.models.enums import Category, ConfidenceLevel
from app.models.schemas import (
    IdentificationRequest,
    IdentificationResponse,
    ErrorResponse,
    SpeciesListResponse,
    SpeciesRecord,
)
from app.services.identification_service import IdentificationService
from app.services.species_catalog import SpeciesCatalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Identification"])


@router.post(
    "/identify",
    response_model=IdentificationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Image could not be decoded"},
    },
    summary="Identify wildlife species",
    description="""
    Identify the species in a photo and return its safety guidance.

    **Image Requirements:**
    - Base64-encoded JPEG or PNG (data URL prefix allowed)
    - Up to 10MB by default (`max_image_size_mb`)

    A null `species` means the photo could not be identified.
    `requires_warning` is set for dangerous and lethal species.
    """
)
async def identify_species(
    request: IdentificationRequest,
    service: IdentificationService = Depends(get_identification_service),
    preprocessor: ImagePreprocessor = Depends(get_preprocessor),
) -> IdentificationResponse:
    """Identify a species from a base64-encoded photo."""
    try:
        image = preprocessor.decode_base64(request.image)
    except ValueError as e:
        logger.warning(f"Rejected undecodable image: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    result = await service.identify(image)

    return IdentificationResponse(
        species=result.species,
        confidence=result.confidence,
        confidence_level=ConfidenceLevel.from_score(result.confidence),
        requires_warning=(
            result.species is not None and result.species.danger_level.requires_warning
        ),
        source=result.source,
        metadata={
            **result.metadata,
            "classifier_state": service.state.value,
        }
    )


@router.get(
    "/species",
    response_model=SpeciesListResponse,
    summary="List catalog species",
)
async def list_species(
    category: Optional[Category] = None,
    catalog: SpeciesCatalog = Depends(get_species_catalog),
) -> SpeciesListResponse:
    """List all species, optionally filtered by category."""
    species = catalog.by_category(category) if category else list(catalog)
    return SpeciesListResponse(species=species, total=len(species))


@router.get(
    "/species/{species_id}",
    response_model=SpeciesRecord,
    responses={404: {"model": ErrorResponse, "description": "Unknown species"}},
    summary="Get one species",
)
async def get_species(
    species_id: str,
    catalog: SpeciesCatalog = Depends(get_species_catalog),
) -> SpeciesRecord:
    """Look up a species by id, common name or scientific name."""
    species = catalog.get(species_id) or catalog.find_by_name(species_id)
    if species is None:
        raise HTTPException(status_code=404, detail=f"Unknown species: {species_id}")
    return species
