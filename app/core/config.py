"""
Application configuration with environment-based settings.

Configuration is centralized here to allow easy swapping between
development, staging, and production environments.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    app_name: str = "Wildlife Safety Identifier API"
    app_version: str = "0.1.0"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Primary model configuration
    enable_primary_model: bool = True
    model_id: str = "google/mobilenet_v2_1.0_224"
    model_cache_dir: Optional[str] = None
    device: str = "cpu"

    # Image handling
    sample_window: int = 100  # Side of the centred colour sampling window
    max_image_size_mb: float = 10.0  # Decoded upload limit

    # Selection and confidence
    confidence_floor: float = 0.70
    confidence_span: float = 0.25
    confidence_cap: float = 0.98
    strict_confidence: bool = False
    min_candidate_weight: float = 1.0
    random_seed: Optional[int] = None

    # Explicit mapping from primary model labels to catalog species ids.
    # Empty means the primary prediction never picks the species itself.
    label_map: dict[str, str] = {}

    # Reference data
    catalog_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "WILDLIFE_ID_"
        protected_namespaces = ()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
