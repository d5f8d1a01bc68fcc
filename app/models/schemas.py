"""
Pydantic schemas for catalog records and API request/response validation.

These schemas define the contract between the API and clients,
ensuring type safety and automatic documentation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
import base64
import binascii

from app.core.config import get_settings
from app.models.enums import Category, DangerLevel, ConfidenceLevel, IdentificationSource


# === Catalog Schemas ===

class SpeciesRecord(BaseModel):
    """
    Reference record for one species in the catalog.

    Records are immutable once loaded. First aid and emergency advice
    are present exactly when the species is not harmless.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable species key", min_length=1)
    name: str = Field(..., description="Common name")
    scientific_name: str = Field(..., description="Binomial or genus name")
    category: Category
    danger_level: DangerLevel
    description: str = ""
    habitat: str = ""
    image_url: Optional[str] = None
    safety_tips: tuple[str, ...] = Field(default_factory=tuple)
    first_aid: Optional[tuple[str, ...]] = None
    emergency_advice: Optional[str] = None

    @model_validator(mode="after")
    def check_first_aid_matches_danger(self) -> "SpeciesRecord":
        """Harmless species carry no first aid; all others must."""
        harmless = self.danger_level == DangerLevel.HARMLESS
        has_first_aid = bool(self.first_aid)
        has_advice = bool(self.emergency_advice)
        if harmless and (has_first_aid or has_advice):
            raise ValueError(
                f"Species '{self.id}' is harmless but has first aid or emergency advice"
            )
        if not harmless and not (has_first_aid and has_advice):
            raise ValueError(
                f"Species '{self.id}' is {self.danger_level.value} but lacks "
                "first aid or emergency advice"
            )
        return self


# === Request Schemas ===

class IdentificationRequest(BaseModel):
    """
    Request schema for species identification.

    Attributes:
        image: Base64-encoded image data (JPEG, PNG supported), optionally
            with a data URL prefix
    """
    image: str = Field(
        ...,
        description="Base64-encoded image data",
        min_length=1
    )

    @field_validator("image")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        """Validate that the image is valid base64 within the size limit."""
        if "," in v:
            v = v.split(",", 1)[1]
        try:
            decoded = base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image data: {e}")
        if not decoded:
            raise ValueError("Image data is empty")
        max_mb = get_settings().max_image_size_mb
        if len(decoded) > max_mb * 1024 * 1024:
            raise ValueError(f"Image exceeds {max_mb:g}MB limit")
        return v


# === Response Schemas ===

class IdentificationResponse(BaseModel):
    """
    Identification result returned to clients.

    `species` is null when the species could not be identified; a null
    species always comes with zero confidence.
    """
    species: Optional[SpeciesRecord] = Field(
        default=None,
        description="Identified species, or null if none could be identified"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Confidence score (0-1)"
    )
    confidence_level: ConfidenceLevel
    requires_warning: bool = Field(
        default=False,
        description="True when the species is dangerous or lethal"
    )
    source: IdentificationSource
    metadata: dict = Field(default_factory=dict)


class SpeciesListResponse(BaseModel):
    """Catalog listing."""
    species: list[SpeciesRecord]
    total: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(
        default=None,
        description="Additional error details"
    )
