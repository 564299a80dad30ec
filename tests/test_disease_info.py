import os
import sys
import pytest

# Add the project root to the path to allow importing from 'app' and 'rice_classifier'
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from rice_classifier import lookup_disease_info, format_confidence
from rice_classifier.disease_info import DISEASE_DATABASE


@pytest.mark.parametrize("label", list(DISEASE_DATABASE))
def test_exact_names_map_to_themselves(label):
    assert lookup_disease_info(label) is DISEASE_DATABASE[label]


@pytest.mark.parametrize("label, expected", [
    ("  healthy  ", "Healthy"),
    ("HEALTHY RICE LEAF", "Healthy Rice Leaf"),
    ("Leaf scald", "Leaf Scald"),
    ("Rice___Narrow Brown Spot", "Narrow Brown Leaf Spot"),
    ("brown spot (fungal)", "Brown Spot"),
    ("Rice Leaf Blast", "Leaf Blast"),
    ("Bacterial leaf streak", "Bacterial Leaf Blight"),
    ("hispa - rice hispa damage", "Rice Hispa"),
    ("sheath blight stage 2", "Sheath Blight"),
])
def test_keyword_matching(label, expected):
    assert lookup_disease_info(label).name == expected


def test_unknown_label_falls_back():
    info = lookup_disease_info("  Tungro  ")
    assert info.name == "Tungro"
    assert info.severity == "medium"
    assert "not available" in info.description


def test_severity_values():
    assert lookup_disease_info("Leaf Blast").severity == "high"
    assert lookup_disease_info("Healthy").severity == "low"


@pytest.mark.parametrize("score, expected", [(0.92, "92.0%"), (0.0, "0.0%"), (0.1234, "12.3%"), (1.0, "100.0%")])
def test_format_confidence(score, expected):
    assert format_confidence(score) == expected
