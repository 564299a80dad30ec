"""
Este arquivo contém os modelos Pydantic que definem a estrutura (o "schema")
dos dados que entram e, principalmente, saem da nossa API.

No padrão MVC de uma API REST, este arquivo é a implementação da camada "View".

Eles são usados diretamente pelo FastAPI para:
1.  Validar Requisições: Garantir que o corpo enviado para /classify
    contenha a imagem em base64 (ClassifyRequest).
2.  Validar Respostas: Garantir que o JSON retornado siga exatamente o
    contrato definido aqui (ClassificationResponse).
3.  Documentação Automática: Gerar a documentação interativa
    (em /docs e /redoc) com exemplos claros dos schemas.

Os modelos Prediction e DiseaseInfo vêm do pacote
rice_classifier, que não depende da API.
"""

from pydantic import BaseModel
from typing import List, Literal, Optional

from rice_classifier import Prediction, DiseaseInfo

__all__ = [
    "Prediction",
    "DiseaseInfo",
    "ClassifyRequest",
    "ClassificationResponse",
]

class ClassifyRequest(BaseModel):
    image: Optional[str] = None
    mime_type: str = "image/jpeg"

class ClassificationResponse(BaseModel):
    status: Literal["success", "error"]
    top_prediction: Optional[Prediction] = None
    all_predictions: List[Prediction] = []
    error: Optional[str] = None
    raw_text: Optional[str] = None
    disease_info: Optional[DiseaseInfo] = None
