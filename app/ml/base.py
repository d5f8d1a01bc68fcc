"""
Base classes and interfaces for ML components.

Model-backed components inherit from BaseMLComponent to ensure consistent
interfaces and enable easy swapping of implementations (a real network in
production, a stub in tests).

Design Principles:
1. Each component is independently replaceable
2. Loading is explicit and may fail; callers decide how to degrade
3. All predictions include confidence scores
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar, Generic
import logging
import time

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PredictionResult(Generic[T]):
    """
    Generic prediction result wrapper.

    Attributes:
        prediction: The actual prediction result
        confidence: Confidence score (0-1)
        latency_ms: Inference time in milliseconds
        model_version: Version of model used
        metadata: Additional metadata
    """
    prediction: T
    confidence: float
    latency_ms: float = 0.0
    model_version: str = "unknown"
    metadata: dict = field(default_factory=dict)


@dataclass
class ModelInfo:
    """Information about a loaded model."""
    name: str
    version: str
    architecture: str
    input_size: tuple[int, int]
    num_classes: int
    device: str
    loaded_at: float = field(default_factory=time.time)


@dataclass
class PrimaryPrediction:
    """
    Arg-max output of the primary network.

    The class index lives in the network's own label space, which is not
    the species catalog's.
    """
    class_index: int
    raw_probability: float
    label: Optional[str] = None


class BaseMLComponent(ABC):
    """
    Abstract base class for model-backed components.

    Subclasses must implement:
        - load_model(): Load model weights and prepare for inference
        - predict(): Run inference on an input image
        - get_model_info(): Return information about the loaded model
    """

    def __init__(self, model_path: Optional[str] = None, device: str = "cpu"):
        """
        Initialize the ML component.

        Args:
            model_path: Model identifier or path to weights
            device: Device for inference ("cpu", "cuda", "mps")
        """
        self.model_path = model_path
        self.device = device
        self.model = None
        self._is_loaded = False
        self._model_info: Optional[ModelInfo] = None

    @abstractmethod
    def load_model(self) -> None:
        """
        Load the model weights and prepare for inference.

        Raises on any failure to fetch or build the model.
        """
        pass

    @abstractmethod
    def predict(self, input_data: Any) -> PredictionResult:
        """Run inference and return a PredictionResult."""
        pass

    @abstractmethod
    def get_model_info(self) -> ModelInfo:
        """Return information about the loaded model."""
        pass

    @property
    def is_loaded(self) -> bool:
        """Check if model is loaded and ready for inference."""
        return self._is_loaded

    def ensure_loaded(self) -> None:
        """Ensure model is loaded, loading if necessary."""
        if not self._is_loaded:
            logger.info(f"Loading model: {self.__class__.__name__}")
            self.load_model()
            self._is_loaded = True
