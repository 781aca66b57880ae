from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from veritas.api.rate_limit import SubmissionRateLimiter
from veritas.api.routes_claims import router as claims_router
from veritas.api.routes_products import router as products_router
from veritas.api.routes_products import stats_router
from veritas.api.routes_verify import router as verify_router
from veritas.api.schemas import ErrorBody, ErrorResponse
from veritas.config.settings import settings
from veritas.db.engine import build_engine, ping_db
from veritas.errors import VeritasError
from veritas.logging_conf import setup_logging
from veritas.services.ledger import get_ledger_client

logger = logging.getLogger(__name__)

setup_logging(settings.log_level)

app = FastAPI(title="Veritas API", version="1.0.0")
app.state.ledger = get_ledger_client()
limit = int(os.getenv("RATE_LIMIT_PER_MIN", settings.rate_limit_per_min))
app.state.submission_limiter = SubmissionRateLimiter(limit_per_min=limit)

cors_env = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
cors_origins = [o.strip() for o in cors_env.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products_router, prefix="/api")
app.include_router(claims_router, prefix="/api")
app.include_router(verify_router, prefix="/api")
app.include_router(stats_router, prefix="/api")


def _error_response(status: int, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(message=message, status=status, details=details))
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


@app.exception_handler(VeritasError)
async def veritas_error_handler(request: Request, exc: VeritasError):
    status = exc.status_code or 500
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(status, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _error_response(400, "Validation error", details)


@app.get("/api/health")
def health():
    engine = build_engine()
    db = ping_db(engine)
    ledger = getattr(app.state.ledger, "mode", "custom")
    payload = {
        "status": "healthy" if db.ok else "unhealthy",
        "service": "veritas-backend",
        "db": {"ok": db.ok, "detail": db.detail},
        "ledger": ledger,
    }
    return JSONResponse(status_code=200 if db.ok else 503, content=payload)


@app.get("/health")
def health_root():
    return health()


@app.get("/api")
def index() -> dict:
    return {"message": "Veritas API Server", "version": app.version}
