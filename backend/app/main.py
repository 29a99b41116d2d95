# Run from backend/:  uvicorn app.main:app --host 0.0.0.0 --port 8000 --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.config import get_settings
from app.services.completion import CompletionClient
from app.services.errors import DebateError
from app.services.quota_store import create_quota_store

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Before 'yield': build the clients every request shares
# - one AsyncOpenAI-backed completion client
# - one quota store (or None when no store is configured → no limits)
# After 'yield': close their connection pools
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    app.state.completion_client = CompletionClient.from_settings(settings)
    app.state.quota_store = create_quota_store(settings)

    yield

    if app.state.quota_store is not None:
        await app.state.quota_store.close()
    await app.state.completion_client.close()


app = FastAPI(
    title="Debate Trainer",
    description="Debate practice against an AI opponent with rubric scoring",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# =============================================================================
# ERROR RESPONSES
# =============================================================================
#
# Every failure leaves the API as {"error": "<message>"}.
#

@app.exception_handler(DebateError)
async def debate_error_handler(request: Request, exc: DebateError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or wrongly typed fields: 400 with the offending fields."""
    fields = []
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        fields.append(field_path or "body")
    logger.info(f"Rejected request body: {fields}")
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request body: {', '.join(fields)}"},
    )


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    store = getattr(request.app.state, "quota_store", None)
    return {
        "status": "healthy",
        "quota_store": store.backend if store is not None else "disabled",
    }
