"""
Primary Classifier Adapter

Wraps a pretrained image-classification network (Hugging Face
transformers) behind the BaseMLComponent interface.

Architecture Decision:
- Default: MobileNetV2 1.0/224 (ImageNet-1K), small enough for CPU serving
- Any `AutoModelForImageClassification` checkpoint can be configured

The network's label space (ImageNet classes) is foreign to the species
catalog, so its arg-max is reported as a PrimaryPrediction and it is up to
the identification service to decide how much to trust it.
"""

import logging
import time
from typing import Optional

import numpy as np
from PIL import Image

from app.ml.base import BaseMLComponent, PredictionResult, ModelInfo, PrimaryPrediction
from app.ml.preprocessor import ImagePreprocessor

logger = logging.getLogger(__name__)


class PrimaryClassifierAdapter(BaseMLComponent):
    """
    Forward-pass adapter around a transformers image classifier.

    Model loading is lazy: nothing is downloaded or imported until
    load_model() runs, and any failure there is raised to the caller.

    Usage:
        adapter = PrimaryClassifierAdapter(model_id="google/mobilenet_v2_1.0_224")
        adapter.ensure_loaded()
        result = adapter.predict(pil_image)
        result.prediction.class_index, result.prediction.raw_probability
    """

    DEFAULT_MODEL_ID = "google/mobilenet_v2_1.0_224"

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL_ID,
        device: str = "cpu",
        cache_dir: Optional[str] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
    ):
        """
        Initialize the adapter.

        Args:
            model_id: Hugging Face model id or local checkpoint directory
            device: Inference device
            cache_dir: Download cache for model weights
            preprocessor: Decodes and converts images to RGB
        """
        super().__init__(model_id, device)
        self.cache_dir = cache_dir
        self.preprocessor = preprocessor or ImagePreprocessor()
        self.processor = None
        self._id2label: dict[int, str] = {}

    def load_model(self) -> None:
        """
        Fetch and build the network and its image processor.

        Raises:
            ImportError: If torch/transformers are not installed
            Exception: Any download or model construction error
        """
        import torch  # noqa: F401
        from transformers import AutoImageProcessor, AutoModelForImageClassification

        logger.info(f"Loading primary classifier: {self.model_path}")
        start = time.perf_counter()

        self.processor = AutoImageProcessor.from_pretrained(
            self.model_path,
            cache_dir=self.cache_dir,
        )
        model = AutoModelForImageClassification.from_pretrained(
            self.model_path,
            cache_dir=self.cache_dir,
        )
        model.eval()
        model.to(self.device)
        self.model = model

        self._id2label = {int(k): v for k, v in (model.config.id2label or {}).items()}

        image_size = getattr(model.config, "image_size", None) or 224
        self._model_info = ModelInfo(
            name="primary_classifier",
            version=getattr(model.config, "_name_or_path", None) or str(self.model_path),
            architecture=model.config.model_type,
            input_size=(image_size, image_size),
            num_classes=model.config.num_labels,
            device=self.device
        )

        self._is_loaded = True
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            f"Primary classifier loaded: {self._model_info.num_classes} classes "
            f"in {elapsed:.0f}ms"
        )

    def predict(self, input_data: Image.Image) -> PredictionResult[PrimaryPrediction]:
        """
        Run a forward pass on a decoded image.

        The checkpoint's image processor does the resizing, cropping and
        normalization the network was trained with.

        Args:
            input_data: PIL Image at any resolution

        Returns:
            PredictionResult containing the arg-max PrimaryPrediction
        """
        import torch

        if not self._is_loaded:
            raise RuntimeError("Primary classifier is not loaded")

        start_time = time.perf_counter()

        prepared = self.preprocessor.prepare(input_data)
        with prepared.image as rgb:
            inputs = self.processor(images=rgb, return_tensors="pt")
        pixel_values = inputs["pixel_values"].to(self.device)

        with torch.no_grad():
            logits = self.model(pixel_values=pixel_values).logits

        probs = torch.softmax(logits, dim=-1)[0].cpu().numpy()
        top_idx = int(np.argmax(probs))
        top_prob = float(probs[top_idx])

        prediction = PrimaryPrediction(
            class_index=top_idx,
            raw_probability=top_prob,
            label=self._id2label.get(top_idx)
        )

        latency = (time.perf_counter() - start_time) * 1000

        return PredictionResult(
            prediction=prediction,
            confidence=top_prob,
            latency_ms=latency,
            model_version=self._model_info.version if self._model_info else "unknown",
            metadata={"original_size": prepared.original_size}
        )

    def get_model_info(self) -> ModelInfo:
        """Return model information."""
        if self._model_info is None:
            raise RuntimeError("Primary classifier is not loaded")
        return self._model_info
