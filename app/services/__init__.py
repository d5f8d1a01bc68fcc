# Services module
from app.services.species_catalog import SpeciesCatalog
from app.services.identification_service import IdentificationService, IdentificationResult

__all__ = [
    "SpeciesCatalog",
    "IdentificationService",
    "IdentificationResult",
]
