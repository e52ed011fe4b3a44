"""FastAPI service — threat analysis for the desktop front end.

Exposes analysis, interactive chat and provider settings over HTTP.
Starts the server with:

    uvicorn tyr.api.main:app --reload --port 8000

Or:

    python -m tyr.api.main
"""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import NoReturn

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from tyr.config import AGENT_VERSION, Settings, get_settings
from tyr.exceptions import ConfigurationError, ProviderError, ResponseParseError, TyrError
from tyr.llm import PROVIDER_NAMES, available_providers
from tyr.models import AnalysisResult, InputType
from tyr.services.analyzer import ThreatAnalyzer

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────
# Request / Response schemas
# ──────────────────────────────────────────────────────────────


class AnalyzeRequest(BaseModel):
    """POST body for /analyze."""

    content: str = Field(..., min_length=1, description="Document to analyze.")
    input_type: str = Field(
        default="architecture",
        description="architecture, terraform, kubernetes, api-spec or system.",
        examples=["terraform"],
    )
    include_education: bool = Field(
        default=True,
        description="Ask for an educational note with each threat.",
    )


class InteractiveRequest(BaseModel):
    """POST body for /interactive."""

    query: str = Field(..., min_length=1)
    history: list[str] = Field(
        default_factory=list,
        description="Prior turns; even indices are user turns, odd are assistant turns.",
    )


class InteractiveResponse(BaseModel):
    response: str


class SettingsUpdate(BaseModel):
    """PUT body for /settings. Omitted fields keep their current value."""

    ai_provider: str | None = Field(default=None, examples=["claude"])
    ollama_model: str | None = Field(default=None, examples=["llama3.1:8b"])
    anthropic_api_key: str | None = None

    @field_validator("ai_provider")
    @classmethod
    def _known_provider(cls, value: str | None) -> str | None:
        if value is None:
            return value
        name = value.strip().lower()
        if name not in PROVIDER_NAMES:
            raise ValueError(
                f"Unknown AI provider: {value}. Available: {', '.join(PROVIDER_NAMES)}"
            )
        return name


class ProviderInfo(BaseModel):
    """Response from GET /provider and PUT /settings."""

    provider: str
    available: list[str]
    display_name: str | None = Field(
        default=None,
        description="Human-readable backend name; null when the backend is not configured.",
    )
    model: str | None = None
    error: str | None = None


# ──────────────────────────────────────────────────────────────
# Shared resources (lifespan-managed)
# ──────────────────────────────────────────────────────────────

_settings: Settings | None = None
_analyzer: ThreatAnalyzer | None = None
# Endpoints run in the threadpool; guards _analyzer and _settings swaps.
_analyzer_lock = threading.RLock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings on startup and release the provider on shutdown."""
    global _settings

    _settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, _settings.log_level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    logger.info("Starting up — provider=%s", _settings.ai_provider)

    yield  # ← app runs here

    logger.info("Shutting down...")
    _reset_analyzer()


def _current_settings() -> Settings:
    return _settings or get_settings()


def _reset_analyzer() -> None:
    global _analyzer
    with _analyzer_lock:
        if _analyzer is not None:
            _analyzer.close()
            _analyzer = None


def _get_analyzer() -> ThreatAnalyzer:
    """Return the shared analyzer, building it from the current settings."""
    global _analyzer
    with _analyzer_lock:
        if _analyzer is None:
            _analyzer = ThreatAnalyzer(settings=_current_settings())
        return _analyzer


def _raise_http(exc: TyrError) -> NoReturn:
    """Translate a core error into the matching HTTP status."""
    if isinstance(exc, ConfigurationError):
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if isinstance(exc, ResponseParseError):
        raise HTTPException(
            status_code=502,
            detail={"error": exc.diagnostic, "response": exc.payload},
        ) from exc
    if isinstance(exc, ProviderError):
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


# ──────────────────────────────────────────────────────────────
# FastAPI app
# ──────────────────────────────────────────────────────────────

app = FastAPI(
    title="Tyr Threat Modeling Service",
    description=(
        "AI-powered STRIDE threat modeling for architecture descriptions, "
        "infrastructure code and API specifications."
    ),
    version=AGENT_VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "analyzer_ready": _analyzer is not None}


@app.get("/provider", response_model=ProviderInfo)
def get_provider():
    """Describe the configured backend.

    Builds the provider if needed; a missing credential is reported in
    ``error`` rather than failing the request.
    """
    settings = _current_settings()
    info = ProviderInfo(provider=settings.ai_provider, available=available_providers())
    try:
        analyzer = _get_analyzer()
    except ConfigurationError as exc:
        info.error = str(exc)
        return info
    info.display_name = analyzer.provider_name
    info.model = analyzer.model_name
    return info


@app.put("/settings", response_model=ProviderInfo)
def update_settings(req: SettingsUpdate):
    """Override provider settings for this process.

    The current provider is released; the next request builds a fresh
    one from the updated settings.
    """
    global _settings

    changes = req.model_dump(exclude_none=True)
    with _analyzer_lock:
        _settings = _current_settings().model_copy(update=changes)
        _reset_analyzer()
    logger.info("Settings updated: %s", sorted(changes))
    return get_provider()


@app.post("/analyze", response_model=AnalysisResult)
def analyze(req: AnalyzeRequest):
    """Run a STRIDE analysis of the submitted document."""
    try:
        input_type = InputType.from_string(req.input_type)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        return _get_analyzer().analyze(req.content, input_type, req.include_education)
    except TyrError as exc:
        logger.error("Analysis failed: %s", exc)
        _raise_http(exc)


@app.post("/interactive", response_model=InteractiveResponse)
def interactive(req: InteractiveRequest):
    """Answer a conversational threat-modeling question."""
    try:
        response = _get_analyzer().interactive_query(req.query, req.history)
    except TyrError as exc:
        logger.error("Interactive query failed: %s", exc)
        _raise_http(exc)
    return InteractiveResponse(response=response)


# ──────────────────────────────────────────────────────────────
# Direct execution: python -m tyr.api.main
# ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "tyr.api.main:app",
        host=_settings.api_host,
        port=_settings.api_port,
        reload=True,
    )
