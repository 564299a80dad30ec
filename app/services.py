import base64
import binascii
import json
from typing import Any, Optional, Protocol
from rice_classifier import RiceDiseaseClassifier, Config, Prediction, parse_prediction_text, lookup_disease_info
from app.schema import ClassificationResponse
import logging

logger = logging.getLogger(__name__)

NO_IMAGE_REASON = "No image data provided"
UNEXPECTED_FORMAT_REASON = (
    "Unexpected API response format from the classification service. "
    "Expected string or list with string."
)
SERVICE_UNAVAILABLE_REASON = (
    "The classification service may be waking up or unavailable (503). "
    "Please try again in 1-2 minutes."
)
UNAVAILABLE_MARKERS = ("503", "Service Unavailable")
EMPTY_TEXT_LABEL = "Error: Could not parse prediction text"


class ImageClassifier(Protocol):
    """Qualquer objeto que envie uma imagem ao serviço remoto e devolva o payload bruto."""
    def predict(self, image_bytes: bytes, mime_type: str) -> Any: ...


# services.py
def load_classifier() -> RiceDiseaseClassifier:
    """
    Cria o cliente do Space a partir das variáveis de ambiente.
    A conexão é feita apenas na primeira predição, então o startup
    do app nunca acessa a rede.
    """
    config = Config.from_env()
    logger.info(f"Usando o Space '{config.space}' (endpoint '{config.api_name}')")
    return RiceDiseaseClassifier(config=config)


def decode_base64_image(data: str) -> bytes:
    """
    Decodifica a imagem enviada em base64, aceitando também o formato
    data URL ("data:image/jpeg;base64,...").
    Levanta ValueError se o conteúdo não for base64 válido.
    """
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    # base64 com quebra de linha (encodebytes, CLI base64)
    data = "".join(data.split())
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image data: {e}")


def is_service_unavailable(message: str) -> bool:
    """O Space hospedado dorme quando ocioso e responde 503 enquanto acorda."""
    return any(marker in message for marker in UNAVAILABLE_MARKERS)


def extract_result_text(payload: Any) -> Optional[str]:
    """Aceita uma string pura ou uma sequência cujo primeiro elemento é string."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (list, tuple)) and payload and isinstance(payload[0], str):
        return payload[0]
    return None


def classify_image(
    image_bytes: Optional[bytes],
    mime_type: str,
    classifier: ImageClassifier,
    tolerance: Optional[float] = None,
) -> ClassificationResponse:
    """
    1. Valida a presença da imagem.
    2. Envia a imagem para o serviço remoto (uma única tentativa).
    3. Verifica o formato do payload retornado.
    4. Converte o texto em predições ordenadas.
    Nenhuma exceção escapa desta função: toda falha vira um
    ClassificationResponse com status "error".
    """
    # 1. Validação da entrada (Nenhuma chamada de rede)
    if not image_bytes:
        return ClassificationResponse(status="error", error=NO_IMAGE_REASON)

    if tolerance is None:
        config = getattr(classifier, "config", None)
        tolerance = getattr(config, "dedup_tolerance", 1e-6)

    # 2. Chamada ao serviço remoto
    try:
        payload = classifier.predict(image_bytes, mime_type)
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.error(f"Erro durante a predição remota: {message}")
        if is_service_unavailable(message):
            reason = SERVICE_UNAVAILABLE_REASON
        else:
            reason = f"Server error: {message}"
        return ClassificationResponse(
            status="error",
            error=reason,
            raw_text=f"Server-side error: {message}",
        )

    logger.info(f"Payload recebido do serviço remoto: {type(payload).__name__}")

    # 3. Verificação do formato
    result_text = extract_result_text(payload)
    if result_text is None:
        logger.error(f"Formato inesperado de resposta: {payload!r}")
        return ClassificationResponse(
            status="error",
            error=UNEXPECTED_FORMAT_REASON,
            raw_text=json.dumps(payload, default=str),
        )

    # 4. Parsing (nunca falha)
    parsed = parse_prediction_text(result_text, tolerance)
    top_prediction = parsed.top_prediction
    all_predictions = parsed.all_predictions
    if top_prediction is None:
        # Texto vazio: o parser não tem nem o fallback para oferecer
        logger.error("Texto de predição vazio, usando placeholder.")
        top_prediction = Prediction(label=EMPTY_TEXT_LABEL, score=0.0)
        all_predictions = [top_prediction]

    return ClassificationResponse(
        status="success",
        top_prediction=top_prediction,
        all_predictions=all_predictions,
        raw_text=result_text,
        disease_info=lookup_disease_info(top_prediction.label),
    )
