"""FastAPI application exposing ticket ingestion and answering over HTTP."""

from __future__ import annotations

import json
import logging
import secrets
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from ticket_rag.config import get_settings
from ticket_rag.errors import (
    ConfigurationError,
    IngestionError,
    UpstreamServiceError,
    ValidationError,
)
from ticket_rag.services import Services, build_services

logger = logging.getLogger(__name__)

EMBED_JSON_SOURCE = "api:/embed-json"

app = FastAPI(
    title="Ticket RAG API",
    version="0.1.0",
    description="Support-ticket ingestion and retrieval-augmented answering.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Dependencies ──────────────────────────────────────────────────────
@lru_cache()
def get_services() -> Services:
    """Build the service graph once; configuration errors are not cached."""
    return build_services(get_settings())


def _secret_matches(expected: str, provided: Any, env_name: str) -> bool:
    if not expected:
        raise ConfigurationError([env_name])
    given = "" if provided is None else str(provided)
    return secrets.compare_digest(given.encode(), expected.encode())


def _unauthorized() -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


# ── Error mapping ─────────────────────────────────────────────────────
@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("[%s] %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Invalid configuration", "details": str(exc)},
    )


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "malformed request")
    detail = f"{where}: {message}" if where else message
    return JSONResponse(status_code=400, content={"error": f"Invalid request body ({detail})"})


@app.exception_handler(IngestionError)
async def _ingestion_error(request: Request, exc: IngestionError) -> JSONResponse:
    logger.debug("[%s] %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Failed to process embeddings",
            "details": str(exc),
            "upserted": exc.upserted_count,
            "batch": exc.batch_index + 1,
            "batches": exc.batch_count,
        },
    )


@app.exception_handler(UpstreamServiceError)
async def _upstream_error(request: Request, exc: UpstreamServiceError) -> JSONResponse:
    logger.debug("[%s] %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Upstream service failure", "service": exc.service, "details": str(exc)},
    )


# ── Request schemas ───────────────────────────────────────────────────
class ChatRequest(BaseModel):
    """Incoming question.  Loosely typed: values are validated by the pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    question: Any = None
    top_k: Any = Field(default=None, alias="topK")
    password: Any = None


SAMPLE_TICKETS: list[dict[str, Any]] = [
    {
        "respAbertura": "Renata Borges",
        "titulo": "Plus nao puxa a loja",
        "problema": "Plus nao puxa a loja ao fazer login",
        "solucao": "disco c estava cheio, wash mexeu e depois deu erro de conexao, "
        "executei plusinstall e deu certo",
        "menuSistema": "",
        "nomeCli": "FUFU LEGAL",
        "nomeFuncionarioCliente": "Daniel Machado",
        "Comentario": None,
    },
    {
        "respAbertura": "Renata Borges",
        "titulo": "Nota fiscal",
        "problema": "cean invalido",
        "solucao": "corrigido cod de barras no cadastro e nfe foi emitida",
        "menuSistema": "",
        "nomeCli": "TELLURE AGRO",
        "nomeFuncionarioCliente": "Andreia",
        "Comentario": None,
    },
]


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/ready")
def ready(services: Services = Depends(get_services)) -> JSONResponse:
    """Readiness probe — checks the vector store is reachable."""
    if services.store.health_check():
        return JSONResponse(status_code=200, content={"status": "ready"})
    return JSONResponse(status_code=503, content={"status": "unavailable"})


@app.get("/test")
def sample_tickets() -> list[dict[str, Any]]:
    """Sample payload for manual testing of ``/embed-json``."""
    return SAMPLE_TICKETS


@app.post("/embed-json")
async def embed_json(
    request: Request,
    services: Services = Depends(get_services),
    x_embed_password: str | None = Header(default=None),
) -> Any:
    """Embed a JSON array of tickets and upsert them into the index.

    The body is parsed only after the password check.
    """
    if not _secret_matches(services.settings.embed_password, x_embed_password, "EMBED_PASSWORD"):
        return _unauthorized()

    try:
        payload = json.loads(await request.body())
    except ValueError as exc:
        raise ValidationError(f"Invalid JSON body: {exc}") from exc

    count = len(payload) if isinstance(payload, list) else 0
    logger.info("[/embed-json] %d record(s) received", count)
    result = await run_in_threadpool(services.ingestion.ingest, payload, EMBED_JSON_SOURCE)
    return {
        "ok": True,
        "upserted": result.upserted_count,
        "index": result.index_name,
        "namespace": result.namespace,
        "model": result.embedding_model,
    }


def _chat(request: ChatRequest, services: Services, header_password: str | None) -> Any:
    provided = header_password or request.password
    if not _secret_matches(services.settings.chat_password, provided, "CHAT_PASSWORD"):
        return _unauthorized()

    result = services.answering.answer(request.question, request.top_k)
    return {
        "ok": True,
        "answer": result.answer,
        "matches": [m.model_dump() for m in result.matches],
    }


@app.post("/chat")
def chat(
    request: ChatRequest,
    services: Services = Depends(get_services),
    x_chat_password: str | None = Header(default=None),
) -> Any:
    """Answer a question from the stored tickets."""
    return _chat(request, services, x_chat_password)


@app.post("/api/chat")
def api_chat(
    request: ChatRequest,
    services: Services = Depends(get_services),
    x_chat_password: str | None = Header(default=None),
) -> Any:
    """Alias of ``/chat`` kept for existing frontends."""
    return _chat(request, services, x_chat_password)
