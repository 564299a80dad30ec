import os
import traceback
from dotenv import load_dotenv
import logging
from fastapi import FastAPI, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import services
from app.schema import ClassifyRequest, ClassificationResponse


from contextlib import asynccontextmanager


logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

# Read environment mode (defaults to prod for safety)
ENV = os.getenv("ENV", "prod").lower()
logger.info(f"Running in {ENV} mode")

# Dicionário global para armazenar o cliente do serviço remoto.
CLASSIFIERS = {}

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Inicialização do app. Cria o cliente do Space (sem conectar ainda).
    """
    global CLASSIFIERS
    logger.info("Configurando o cliente do serviço de classificação...")
    try:
        CLASSIFIERS["rice"] = services.load_classifier()
        logger.info("Cliente configurado com sucesso.")
    except Exception as e:
        logger.error(f"Falha crítica ao configurar o cliente: {str(e)}")
        logger.error(traceback.format_exc())
        raise Exception(f"Falha crítica ao configurar o cliente: {str(e)}")
    # This is the point where the app is ready to handle requests
    yield
    logger.info("Liberando recursos...")
    CLASSIFIERS.clear()


# Initialize FastAPI app with the lifespan manager
app = FastAPI(
    title="Rice Leaf Disease Detector",
    description="Forwards rice leaf photos to a hosted classifier and ranks its predictions",
    version="1.0.0",
    lifespan=lifespan,
)

# Controle de CORS (Cross-Origin Resource Sharing) para prevenir ataques de fontes não autorizadas.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost",
        "http://localhost:8501",  # Streamlit (interface/interface.py)
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _status_code(result: ClassificationResponse) -> int:
    """Traduz o resultado do serviço para o código HTTP."""
    if result.status == "success":
        return 200
    if result.error == services.NO_IMAGE_REASON:
        return 400
    if result.error == services.SERVICE_UNAVAILABLE_REASON:
        return 503
    return 500


async def _run_classification(image_bytes, mime_type: str) -> JSONResponse:
    # A chamada ao Space é bloqueante; roda fora do event loop.
    result = await run_in_threadpool(
        services.classify_image,
        image_bytes,
        mime_type,
        CLASSIFIERS["rice"],
    )
    if result.status == "error":
        logger.error(f"Falha na classificação: {result.error}")
    return JSONResponse(content=result.model_dump(), status_code=_status_code(result))


"""
Routes
"""
@app.get("/")
async def root():
    return {"message": f"Rice Leaf Disease Detector is running in {ENV} mode"}

@app.post("/classify", response_model=ClassificationResponse)
async def classify(request: ClassifyRequest):
    """
    Endpoint de classificação com a imagem em base64 no corpo JSON.
    Este é um 'Controller' enxuto.
    Ele apenas delega a lógica de negócio para o services.py.
    """
    image_bytes = None
    if request.image:
        try:
            image_bytes = services.decode_base64_image(request.image)
        except ValueError as e:
            logger.error(f"Imagem inválida: {str(e)}")
            result = ClassificationResponse(status="error", error=str(e))
            return JSONResponse(content=result.model_dump(), status_code=400)
    return await _run_classification(image_bytes, request.mime_type)

@app.post("/classify/upload", response_model=ClassificationResponse)
async def classify_upload(file: UploadFile = File(...)):
    """
    Endpoint de classificação para upload direto (multipart/form-data).
    """
    if not file.content_type or not file.content_type.startswith("image/"):
        result = ClassificationResponse(status="error", error="Uploaded file is not an image")
        return JSONResponse(content=result.model_dump(), status_code=400)
    content = await file.read()
    return await _run_classification(content, file.content_type)



if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
