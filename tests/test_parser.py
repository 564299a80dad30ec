import os
import sys
import pytest

# Add the project root to the path to allow importing from 'app' and 'rice_classifier'
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from rice_classifier import Prediction, ParseResult, parse_prediction_text

FULL_RESPONSE = (
    "Predicted Class: Healthy (Confidence: 92.0%)\n"
    "All Predictions:\n"
    "1. Healthy: 92.0%\n"
    "2. Leaf Blast: 5.0%"
)


def test_duplicate_of_top_is_not_added_twice():
    result = parse_prediction_text(FULL_RESPONSE)
    assert result.all_predictions == [
        Prediction(label="Healthy", score=0.92),
        Prediction(label="Leaf Blast", score=0.05),
    ]
    assert result.top_prediction == Prediction(label="Healthy", score=0.92)


def test_numbered_list_overrides_first_line():
    text = (
        "Predicted Class: Leaf Blast (Confidence: 60.0%)\n"
        "All Predictions:\n"
        "1. Healthy: 70.0%\n"
        "2. Leaf Blast: 60.0%"
    )
    result = parse_prediction_text(text)
    assert result.top_prediction == Prediction(label="Healthy", score=0.70)
    assert [p.label for p in result.all_predictions] == ["Healthy", "Leaf Blast"]


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
def test_empty_text_gives_empty_result(text):
    result = parse_prediction_text(text)
    assert result.top_prediction is None
    assert result.all_predictions == []


def test_none_is_treated_as_empty():
    assert parse_prediction_text(None) == ParseResult()


def test_garbage_becomes_fallback_prediction():
    result = parse_prediction_text("some garbled text")
    fallback = Prediction(label="some garbled text", score=0.0)
    assert result.top_prediction == fallback
    assert result.all_predictions == [fallback]


def test_fallback_label_is_trimmed():
    result = parse_prediction_text("  \n oops \n ")
    assert result.top_prediction.label == "oops"


def test_first_line_only():
    result = parse_prediction_text("Predicted Class: Brown Spot (Confidence: 81.5%)")
    assert result.top_prediction == Prediction(label="Brown Spot", score=0.815)
    assert result.all_predictions == [result.top_prediction]


def test_list_without_first_line():
    text = "All Predictions:\n1. Sheath Blight: 10.0%\n2. Rice Hispa: 85.0%"
    result = parse_prediction_text(text)
    assert result.top_prediction == Prediction(label="Rice Hispa", score=0.85)
    assert len(result.all_predictions) == 2


def test_top_is_max_of_all_predictions():
    text = (
        "Predicted Class: Brown Spot (Confidence: 40.0%)\n"
        "All Predictions:\n"
        "1. Brown Spot: 40.0%\n"
        "2. Leaf Blast: 35.5%\n"
        "3. Healthy: 24.5%"
    )
    result = parse_prediction_text(text)
    assert result.top_prediction == max(result.all_predictions, key=lambda p: p.score)
    scores = [p.score for p in result.all_predictions]
    assert scores == sorted(scores, reverse=True)


def test_same_label_with_different_score_is_kept():
    text = (
        "Predicted Class: Healthy (Confidence: 92.0%)\n"
        "All Predictions:\n"
        "1. Healthy: 91.0%"
    )
    result = parse_prediction_text(text)
    assert result.all_predictions == [
        Prediction(label="Healthy", score=0.92),
        Prediction(label="Healthy", score=0.91),
    ]


def test_ties_keep_input_order():
    text = "All Predictions:\n1. Leaf Blast: 50.0%\n2. Brown Spot: 50.0%\n3. Healthy: 0.0%"
    result = parse_prediction_text(text)
    assert [p.label for p in result.all_predictions] == ["Leaf Blast", "Brown Spot", "Healthy"]
    assert result.top_prediction.label == "Leaf Blast"


def test_marker_is_case_insensitive_and_noise_is_ignored():
    text = (
        "Predicted Class: Healthy (Confidence: 92.0%)\n"
        "some header the model added\n"
        "   ALL PREDICTIONS:   \n"
        "1. Healthy: 92.0%\n"
        "not a prediction line\n"
        "2. Leaf Blast: 5.0%\n"
    )
    result = parse_prediction_text(text)
    assert [p.label for p in result.all_predictions] == ["Healthy", "Leaf Blast"]


def test_list_lines_before_marker_are_ignored():
    text = "1. Healthy: 92.0%\nAll Predictions:\n1. Leaf Blast: 5.0%"
    result = parse_prediction_text(text)
    assert result.all_predictions == [Prediction(label="Leaf Blast", score=0.05)]


def test_malformed_number_uses_numeric_prefix():
    text = "All Predictions:\n1. Healthy: 1.2.3%\n2. Leaf Blast: 5.0%"
    result = parse_prediction_text(text)
    assert [p.label for p in result.all_predictions] == ["Leaf Blast", "Healthy"]
    assert result.all_predictions[1].score == pytest.approx(0.012)


def test_percentage_without_digits_is_skipped():
    text = "All Predictions:\n1. Healthy: .%\n2. Leaf Blast: 5.0%"
    result = parse_prediction_text(text)
    assert result.all_predictions == [Prediction(label="Leaf Blast", score=0.05)]


def test_tolerance_is_tunable():
    text = (
        "Predicted Class: Healthy (Confidence: 92.0%)\n"
        "All Predictions:\n"
        "1. Healthy: 91.9%"
    )
    assert len(parse_prediction_text(text).all_predictions) == 2
    assert len(parse_prediction_text(text, tolerance=0.01).all_predictions) == 1


def test_parsing_is_idempotent():
    assert parse_prediction_text(FULL_RESPONSE) == parse_prediction_text(FULL_RESPONSE)


def test_predictions_are_immutable():
    prediction = parse_prediction_text(FULL_RESPONSE).top_prediction
    with pytest.raises(Exception):
        prediction.score = 1.0
