# ML module initialization
from app.ml.base import BaseMLComponent, PredictionResult, PrimaryPrediction
from app.ml.preprocessor import ImagePreprocessor
from app.ml.feature_extractor import ColorFeatureExtractor, ColorProfile, NEUTRAL_PROFILE
from app.ml.heuristic_scorer import HeuristicSpeciesScorer, ScoreEntry
from app.ml.weighted_selector import WeightedSelector
from app.ml.species_classifier import PrimaryClassifierAdapter

__all__ = [
    "BaseMLComponent",
    "PredictionResult",
    "PrimaryPrediction",
    "ImagePreprocessor",
    "ColorFeatureExtractor",
    "ColorProfile",
    "NEUTRAL_PROFILE",
    "HeuristicSpeciesScorer",
    "ScoreEntry",
    "WeightedSelector",
    "PrimaryClassifierAdapter",
]
