"""
This script works as a module and as a CLI tool.

To use it as a module, you can do:
::

    from rice_classifier import RiceDiseaseClassifier, parse_prediction_text

    # connect to the remote Gradio Space (lazy, on first predict)
    classifier = RiceDiseaseClassifier(config="rice_config.yml")
    # or build the config from environment variables
    classifier = RiceDiseaseClassifier()
    # send an image and get the raw text back
    raw = classifier.predict(image_bytes, mime_type="image/jpeg")
    # turn the raw text into ranked predictions
    result = parse_prediction_text(raw)
    result.top_prediction.label, result.top_prediction.score

Or, or you can use it as a CLI tool, you can do:
::

python -m rice_classifier.rice_classifier predict \
    --image_path="samples/leaf.jpg"

python -m rice_classifier.rice_classifier parse \
    --raw_text="Predicted Class: Healthy (Confidence: 92.0%)"

"""

import os
import re
import logging
import mimetypes
import tempfile
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import yaml
from gradio_client import Client, handle_file
from pydantic import BaseModel, ConfigDict

import dotenv
dotenv.load_dotenv()

logger = logging.getLogger(__name__)

TOP_PREDICTION_PATTERN = re.compile(r"Predicted Class: ([^(]+)\s*\(Confidence: ([0-9.]+)%\)")
LIST_ENTRY_PATTERN = re.compile(r"^\d+\.\s*([^:]+):\s*([0-9.]+)%")
ALL_PREDICTIONS_MARKER = "all predictions:"
NUMBER_PREFIX_PATTERN = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class Prediction(BaseModel):
    """A single label with its confidence, normalized to [0, 1]."""
    model_config = ConfigDict(frozen=True)

    label: str
    score: float


class ParseResult(BaseModel):
    top_prediction: Optional[Prediction] = None
    all_predictions: List[Prediction] = []


@dataclass
class Config:
    """
    A dataclass to hold all configuration parameters for the RiceDiseaseClassifier.

    This object stores settings related to the remote Gradio Space and to the
    parsing of its text responses.
    """
    space: str = "wilsondt/rice-disease-classification"
    """Identifier of the Hugging Face Space hosting the classifier."""
    api_name: str = "/predict"
    """Entry point of the Space that receives the image."""
    image_param: str = "image"
    """Name of the parameter under which the image is sent."""
    hf_token: Optional[str] = None
    """Optional Hugging Face token, needed only for private Spaces."""
    dedup_tolerance: float = 1e-6
    """Scores closer than this are treated as the same re-listed entry."""

    @classmethod
    def from_env(cls) -> "Config":
        """
        Builds a Config from the GRADIO_SPACE, GRADIO_API_NAME, HF_TOKEN and
        DEDUP_TOLERANCE environment variables, falling back to the defaults.
        """
        defaults = cls()
        return cls(
            space=os.getenv("GRADIO_SPACE", defaults.space),
            api_name=os.getenv("GRADIO_API_NAME", defaults.api_name),
            hf_token=os.getenv("HF_TOKEN") or None,
            dedup_tolerance=float(os.getenv("DEDUP_TOLERANCE", defaults.dedup_tolerance)),
        )


def _to_score(percent: str) -> Optional[float]:
    # Longest numeric prefix, so "1.2.3" reads as 1.2
    match = NUMBER_PREFIX_PATTERN.match(percent)
    if not match:
        return None
    return float(match.group(0)) / 100


def parse_prediction_text(raw_text: str, tolerance: float = 1e-6) -> ParseResult:
    """
    Extracts a ranked list of predictions from the text returned by the Space.

    The expected text looks like::

        Predicted Class: Healthy (Confidence: 92.0%)
        All Predictions:
        1. Healthy: 92.0%
        2. Leaf Blast: 5.0%

    Lines that do not match are ignored. The numbered list, when present, decides
    the final ranking, even if it disagrees with the first line. Text that cannot
    be parsed at all becomes a single prediction with the whole text as label and
    score 0, so the caller always has something to show.

    :param raw_text: The text returned by the remote classifier.
    :type raw_text: str
    :param tolerance: Maximum score difference for a listed entry to be considered
                      a repeat of the first-line prediction.
    :type tolerance: float
    :return: The parsed result. Never raises.
    :rtype: ParseResult
    """
    if not isinstance(raw_text, str):
        raw_text = ""

    all_predictions: List[Prediction] = []
    top_prediction: Optional[Prediction] = None
    lines = raw_text.strip().split("\n")

    match = TOP_PREDICTION_PATTERN.search(lines[0])
    if match:
        score = _to_score(match.group(2))
        if score is not None:
            top_prediction = Prediction(label=match.group(1).strip(), score=score)
            all_predictions.append(top_prediction)

    marker_index = next(
        (i for i, line in enumerate(lines) if line.strip().lower().startswith(ALL_PREDICTIONS_MARKER)),
        None,
    )
    if marker_index is not None:
        for line in lines[marker_index + 1:]:
            match = LIST_ENTRY_PATTERN.match(line.strip())
            if not match:
                continue
            label = match.group(1).strip()
            score = _to_score(match.group(2))
            if score is None:
                continue
            if (top_prediction is not None
                    and label == top_prediction.label
                    and abs(score - top_prediction.score) <= tolerance):
                continue
            all_predictions.append(Prediction(label=label, score=score))

    if all_predictions:
        # sorted() is stable, equal scores keep their input order
        all_predictions = sorted(all_predictions, key=lambda p: p.score, reverse=True)
        top_prediction = all_predictions[0]
    elif raw_text.strip():
        logger.warning(f"Could not parse prediction text: {raw_text!r}")
        top_prediction = Prediction(label=raw_text.strip(), score=0.0)
        all_predictions.append(top_prediction)

    return ParseResult(top_prediction=top_prediction, all_predictions=all_predictions)


class RiceDiseaseClassifier:
    """
    A thin client for the rice leaf disease classifier hosted on a Gradio Space.

    The Space is a black box: it receives an image and answers with a block of
    text. This class only handles the round trip; parsing lives in
    :func:`parse_prediction_text`.

    :param config: A path to a YAML config file, a Config object, or None.
                   If None, the config is built from environment variables.
    :type config: str, Config, optional
    :param client: An already connected ``gradio_client.Client`` (or anything with
                   the same ``predict`` signature). If None, one is created on the
                   first call to :meth:`predict`.
    :raises TypeError: If `config` is of an unsupported type.
    """

    def __init__(self, config: Optional[Union[str, Config]] = None, client: Any = None):
        self._load_config(config)
        self._client = client
        self._client_lock = threading.Lock()

    def _load_config(self, config: Optional[Union[str, Config]]) -> None:
        """
        Loads the configuration from a file path, a Config object or the environment.

        :param config: A path to a YAML config file or a Config object.
        :type config: str, Config, optional
        :raises TypeError: If config is of an invalid type.
        """
        if isinstance(config, str):
            with open(config, 'r') as f:
                self.config = Config(**(yaml.safe_load(f) or {}))
            logger.info(f"Loaded config from {config}.")
        elif isinstance(config, Config):
            self.config = config
        elif config is None:
            self.config = Config.from_env()
        else:
            raise TypeError(f"Unsupported config type: {type(config)}")

    @property
    def client(self) -> Any:
        """The Gradio client, connected on first access."""
        with self._client_lock:
            if self._client is None:
                logger.info(f"Connecting to Gradio Space '{self.config.space}'...")
                if self.config.hf_token:
                    self._client = Client(self.config.space, hf_token=self.config.hf_token)
                else:
                    self._client = Client(self.config.space)
        return self._client

    def predict(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> Any:
        """
        Sends an image to the remote classifier and returns its raw payload.

        The bytes are written to a temporary file because the Gradio client
        uploads files from disk. The file is removed whether the call succeeds
        or not.

        :param image_bytes: The encoded image.
        :type image_bytes: bytes
        :param mime_type: The MIME type of the image, used to pick a file suffix.
        :type mime_type: str
        :return: Whatever the Space returned (usually a string).
        :rtype: Any
        """
        suffix = mimetypes.guess_extension(mime_type or "") or ".jpg"
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
            tmp.write(image_bytes)
            tmp_path = tmp.name
        try:
            logger.info(f"Calling {self.config.space}{self.config.api_name} ({len(image_bytes)} bytes, {mime_type})")
            return self.client.predict(
                **{self.config.image_param: handle_file(tmp_path)},
                api_name=self.config.api_name,
            )
        finally:
            os.unlink(tmp_path)


# This script works as a module and as a CLI tool
if __name__ == "__main__":
    import fire
    from pprint import pprint

    def predict(image_path: str, config: str = None):
        """
        Classify a local image with the remote Space.

        :param image_path: Path to the image file.
        :type image_path: str
        :param config: Path to a YAML configuration file.
        :type config: str
        """
        classifier = RiceDiseaseClassifier(config=config)
        mime_type = mimetypes.guess_type(image_path)[0] or "image/jpeg"
        with open(image_path, "rb") as f:
            raw = classifier.predict(f.read(), mime_type=mime_type)
        print(f"Raw response: {raw}")
        if isinstance(raw, (list, tuple)) and raw:
            raw = raw[0]
        pprint(parse_prediction_text(raw, classifier.config.dedup_tolerance).model_dump())

    def parse(raw_text: str):
        """
        Parse a response text without calling the Space.

        :param raw_text: The text to parse.
        :type raw_text: str
        """
        pprint(parse_prediction_text(raw_text).model_dump())

    fire.Fire({
        'predict': predict,
        'parse': parse,
    })
