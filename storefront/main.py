import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn nereden çalışırsa çalışsın .env proje kökünden yüklensin
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from storefront.api import api_router
from storefront.core.config import cors_origins_list, settings
from storefront.core.database import database_ok, init_db
from storefront.core.rate_limit import get_client_ip, limiter
from storefront.core.store import get_store
from storefront.logging import setup_logging

setup_logging(level=settings.log_level, quiet_access_log=settings.environment == "production")
log = logging.getLogger("storefront")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    get_store().ensure()
    log.info("Storefront started: data_dir=%s environment=%s", settings.data_dir, settings.environment)
    yield


app = FastAPI(
    title="GS Storefront API",
    description="Katalog, sepet, ödeme simülasyonu ve sipariş takibi",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail, headers: dict | None = None) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    if isinstance(detail, dict):
        body = {**detail, "status_code": status_code}
    else:
        body = {"message": str(detail), "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: ip=%s path=%s", get_client_ip(request), request.url.path)
    return _error_response(request, 429, "Cok fazla istek. Lutfen bir dakika bekleyin.")


def _validation_error_message(exc: RequestValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Gecersiz istek."
    first = errs[0]
    loc = list(first.get("loc") or [])
    field = str(loc[-1]) if loc else None
    if first.get("type") == "missing":
        if field == "body":
            return "Istek govdesi eksik."
        return f"Zorunlu alan eksik: {field}"
    msg = first.get("msg") or "Gecersiz istek."
    return msg.removeprefix("Value error, ")


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.info(
        "Request validation error (422): path=%s method=%s",
        request.url.path,
        request.method,
    )
    return _error_response(request, 422, _validation_error_message(exc))


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    return _error_response(request, 500, "Beklenmeyen sunucu hatasi.")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok", "database": "ok" if database_ok() else "error"}
