from rice_classifier.rice_classifier import (
    Config,
    ParseResult,
    Prediction,
    RiceDiseaseClassifier,
    parse_prediction_text,
)
from rice_classifier.disease_info import DiseaseInfo, format_confidence, lookup_disease_info

__all__ = [
    "Config",
    "ParseResult",
    "Prediction",
    "RiceDiseaseClassifier",
    "parse_prediction_text",
    "DiseaseInfo",
    "format_confidence",
    "lookup_disease_info",
]
