"""
Species Catalog

Read-only reference table of the species the service can identify,
together with their safety guidance.

Data Sources:
- Primary: app/data/species.json (or the configured catalog path)
- Fallback: empty catalog, reported through get_metadata()

The catalog is loaded once at process start and never mutated. Order is
significant: score entries and selections refer to species by index.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from pydantic import ValidationError

from app.models.enums import Category
from app.models.schemas import SpeciesRecord

logger = logging.getLogger(__name__)


class SpeciesCatalog:
    """
    Ordered, immutable collection of SpeciesRecord.

    Usage:
        catalog = SpeciesCatalog.load()
        redback = catalog.get("redback")
        snakes = catalog.by_category(Category.SNAKE)
    """

    DEFAULT_DATA_PATH = Path(__file__).parent.parent / "data" / "species.json"

    def __init__(
        self,
        records: Sequence[SpeciesRecord],
        metadata: Optional[dict[str, Any]] = None,
        load_error: Optional[str] = None,
    ):
        self._records: tuple[SpeciesRecord, ...] = tuple(records)
        self._by_id: dict[str, SpeciesRecord] = {}
        for record in self._records:
            if record.id in self._by_id:
                raise ValueError(f"Duplicate species id in catalog: {record.id}")
            self._by_id[record.id] = record
        self._metadata = metadata or {}
        self._load_error = load_error

    @classmethod
    def load(cls, data_path: Optional[str] = None) -> "SpeciesCatalog":
        """
        Load the catalog from a JSON file.

        Args:
            data_path: Path to the catalog file. Defaults to the bundled
                app/data/species.json

        Returns:
            SpeciesCatalog; empty with load_error set if the file could
            not be read or validated
        """
        data_file = Path(data_path) if data_path else cls.DEFAULT_DATA_PATH

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            records = [SpeciesRecord(**entry) for entry in data.get("species", [])]
            catalog = cls(records, metadata=data.get("_metadata", {}))

        except FileNotFoundError:
            logger.error(f"Species catalog not found: {data_file}")
            return cls([], load_error=f"Data file not found: {data_file}")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse species catalog {data_file}: {e}")
            return cls([], load_error=f"Invalid JSON in data file: {e}")
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid species record in {data_file}: {e}")
            return cls([], load_error=f"Invalid species record: {e}")

        logger.info(f"Loaded species catalog: {len(catalog)} species from {data_file}")
        return catalog

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SpeciesRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> SpeciesRecord:
        return self._records[index]

    @property
    def records(self) -> tuple[SpeciesRecord, ...]:
        return self._records

    def get(self, species_id: str) -> Optional[SpeciesRecord]:
        """Get a species by its stable id."""
        return self._by_id.get(species_id)

    def find_by_name(self, name: str) -> Optional[SpeciesRecord]:
        """Find a species by common or scientific name, case-insensitively."""
        normalized = name.strip().lower()
        for record in self._records:
            if (
                record.name.lower() == normalized
                or record.scientific_name.lower() == normalized
            ):
                return record
        return None

    def by_category(self, category: Category) -> list[SpeciesRecord]:
        """All species in a category, in catalog order."""
        return [r for r in self._records if r.category == category]

    def is_loaded(self) -> bool:
        """Check if the catalog loaded without error."""
        return self._load_error is None

    def get_metadata(self) -> dict[str, Any]:
        """Get metadata about the loaded data."""
        return {
            "loaded": self.is_loaded(),
            "load_error": self._load_error,
            "species_count": len(self._records),
            "region": self._metadata.get("region", "Unknown"),
            "data_sources": self._metadata.get("sources", []),
            "version": self._metadata.get("version", "Unknown"),
        }
