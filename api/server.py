"""FastAPI server for SwapNet.

Receives requests from the browser UI:
- try-on batches (person photo + garment/accessory photos, blend mode, replica count)
- background replacement batches
- outfit analysis and video motion prompts
- API key override and the saved model library
"""

import logging

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from swapnet.agents import OutfitAnalyzer
from swapnet.config import SwapNetConfig
from swapnet.models import (
    BackgroundRequest,
    BatchResult,
    BatchStatus,
    GenerationRequest,
    ImageAsset,
)
from swapnet.pipeline import BatchCoordinator
from swapnet.services import AssetLibrary, CredentialStore

logger = logging.getLogger(__name__)


app = FastAPI(
    title="SwapNet API",
    description="Multi-image virtual try-on using Gemini image models",
    version="1.0.0",
)

# Enable CORS for the browser UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class BatchResponse(BaseModel):
    """Response with generated images."""
    success: bool
    status: BatchStatus
    images: list[str] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResponse":
        ok = result.status is BatchStatus.COMPLETED
        return cls(
            success=ok,
            status=result.status,
            images=result.outputs,
            error=None if ok else result.last_error,
        )


class AnalyzeRequest(BaseModel):
    """Request body for outfit analysis and motion prompts."""
    image: ImageAsset
    detail_image: ImageAsset | None = None
    count: int = Field(default=3, ge=1, le=10)
    analysis: str | None = None  # reuse a previous analysis


class AnalyzeResponse(BaseModel):
    success: bool
    analysis: str | None = None
    prompts: list[str] = Field(default_factory=list)
    error: str | None = None


class CredentialRequest(BaseModel):
    api_key: str = Field(min_length=11)


# Initialized on first request
_config: SwapNetConfig | None = None
_credentials: CredentialStore | None = None
_coordinator: BatchCoordinator | None = None
_analyzer: OutfitAnalyzer | None = None
_library: AssetLibrary | None = None


def get_config() -> SwapNetConfig:
    global _config
    if _config is None:
        _config = SwapNetConfig()  # Loads from .env automatically via pydantic-settings
    return _config


def get_credentials() -> CredentialStore:
    """Get or create the process-wide credential store."""
    global _credentials
    if _credentials is None:
        config = get_config()
        _credentials = CredentialStore(config.credential_path, default=config.gemini_api_key)
    return _credentials


def get_coordinator() -> BatchCoordinator:
    """Get or create the batch coordinator."""
    global _coordinator
    if _coordinator is None:
        _coordinator = BatchCoordinator.from_config(get_config(), credentials=get_credentials())
    return _coordinator


def get_analyzer() -> OutfitAnalyzer:
    global _analyzer
    if _analyzer is None:
        _analyzer = OutfitAnalyzer(get_coordinator().executor, get_config().gemini)
    return _analyzer


def get_library() -> AssetLibrary:
    global _library
    if _library is None:
        _library = AssetLibrary(get_config().library_path)
    return _library


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "SwapNet API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Detailed health check."""
    has_key = get_credentials().get() is not None

    return {
        "status": "ok" if has_key else "degraded",
        "credential": "configured" if has_key else "missing",
    }


@app.post("/api/tryon", response_model=BatchResponse)
async def generate_tryon(request: GenerationRequest):
    """Generate ``replica_count`` try-on images concurrently.

    Partial failures still return the images that succeeded; only a batch
    where every branch failed reports ``success=False``.
    """
    try:
        result = await get_coordinator().run(request)
    except Exception as e:
        logger.exception("Try-on batch failed")
        return BatchResponse(success=False, status=BatchStatus.FAILED, error=str(e))

    return BatchResponse.from_result(result)


@app.post("/api/background", response_model=BatchResponse)
async def change_background(request: BackgroundRequest):
    """Replace the background of an image, one result per prompt."""
    try:
        result = await get_coordinator().change_background(request)
    except Exception as e:
        logger.exception("Background batch failed")
        return BatchResponse(success=False, status=BatchStatus.FAILED, error=str(e))

    return BatchResponse.from_result(result)


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze_outfit(request: AnalyzeRequest):
    """Describe an outfit and derive video motion prompts from the description."""
    analyzer = get_analyzer()
    try:
        analysis = request.analysis or await analyzer.analyze_outfit(request.image, request.detail_image)
        prompts = await analyzer.generate_prompts(analysis, request.count)
    except Exception as e:
        logger.exception("Outfit analysis failed")
        return AnalyzeResponse(success=False, error=str(e))

    return AnalyzeResponse(success=True, analysis=analysis, prompts=prompts)


@app.put("/api/credential")
async def set_credential(request: CredentialRequest):
    """Store an API key override."""
    get_credentials().set(request.api_key)
    return {"status": "ok"}


@app.delete("/api/credential")
async def clear_credential():
    """Drop the API key override and fall back to the environment key."""
    get_credentials().clear()
    return {"status": "ok", "credential": "configured" if get_credentials().get() else "missing"}


@app.get("/api/library", response_model=list[ImageAsset])
async def list_library():
    return get_library().entries()


@app.post("/api/library", response_model=list[ImageAsset], status_code=status.HTTP_201_CREATED)
async def save_to_library(asset: ImageAsset):
    """Save a model photo; duplicates are rejected."""
    library = get_library()
    if not library.save(asset):
        raise HTTPException(status_code=409, detail="This model is already in the library")
    return library.entries()


@app.delete("/api/library/{asset_id}", response_model=list[ImageAsset])
async def delete_from_library(asset_id: str):
    library = get_library()
    if not library.delete(asset_id):
        raise HTTPException(status_code=404, detail=f"No saved model with id {asset_id}")
    return library.entries()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
