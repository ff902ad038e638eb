from dotenv import load_dotenv

# Load environment variables before configuration is read
load_dotenv()

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hueprint import __version__
from hueprint.api.v1 import get_palette_cache, router as v1_router
from hueprint.config import config
from hueprint.errors import PaletteError
from hueprint.schemas import ErrorResponse, HealthResponse
from hueprint.services.cache import PaletteCache
from hueprint.utils.logging import get_logger

logger = get_logger()

# Fail at import rather than on every request
config.validate_settings()

app = FastAPI(
    title="Hueprint Palette Extractor",
    description="Extract the dominant colors of an uploaded image",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"]
)

app.include_router(v1_router)


@app.exception_handler(PaletteError)
async def palette_error_handler(request: Request, exc: PaletteError) -> JSONResponse:
    """Map validation failures to client errors with a machine-readable code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message, code=exc.code).model_dump()
    )


@app.get("/healthz", response_model=HealthResponse)
async def healthz(cache: PaletteCache = Depends(get_palette_cache)) -> HealthResponse:
    return HealthResponse(ok=True, version=__version__, cache_backend=cache.backend_name)


logger.info("Hueprint API initialized", extra={"version": __version__})
