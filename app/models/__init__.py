# Data models module
from app.models.schemas import (
    SpeciesRecord,
    IdentificationRequest,
    IdentificationResponse,
    SpeciesListResponse,
    ErrorResponse,
)
from app.models.enums import (
    Category,
    DangerLevel,
    ClassifierState,
    IdentificationSource,
    ConfidenceLevel,
)

__all__ = [
    "SpeciesRecord",
    "IdentificationRequest",
    "IdentificationResponse",
    "SpeciesListResponse",
    "ErrorResponse",
    "Category",
    "DangerLevel",
    "ClassifierState",
    "IdentificationSource",
    "ConfidenceLevel",
]
