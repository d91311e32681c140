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
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pywebpush import webpush
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from ncx.api.push import router as push_router
from ncx.core.config import is_vapid_configured, settings
from ncx.core.database import engine, init_db
from ncx.core.errors import ConfigurationError, ValidationError
from ncx.core.rate_limit import limiter
from ncx.core.vapid import VapidContext
from ncx.logging import setup_logging
from ncx.services import DeliveryStats

setup_logging(level=logging.INFO)
log = logging.getLogger("ncx")

_ROOT = Path(__file__).resolve().parent.parent
STATIC_DIR = _ROOT / "static"
# Çalışma dizininden de dene (uvicorn farklı yerden çalıştırılırsa)
if not STATIC_DIR.is_dir():
    STATIC_DIR = Path.cwd() / "static"


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.vapid = VapidContext.from_settings(settings)
    app.state.push_sender = webpush
    app.state.delivery_stats = DeliveryStats()
    log.info("VAPID keys loaded: %s", "yes" if is_vapid_configured() else "NO (.env dosyasına VAPID_PUBLIC_KEY / VAPID_PRIVATE_KEY ekleyin)")
    yield


app = FastAPI(
    title="NCX Push API",
    description="Web push abonelik ve bildirim dağıtımı",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("rate limit: path=%s detail=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(ValidationError)
def push_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    # İstemci hatası; sunucu hatası olarak loglanmaz
    log.info("push validation failed: path=%s %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"ok": False, "error": str(exc)})


@app.exception_handler(ConfigurationError)
def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    log.error("Configuration error: path=%s %s", request.url.path, exc)
    return _error_response(request, 500, str(exc))


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Unexpected server error."})


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
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(push_router)

if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/sw.js", include_in_schema=False)
def service_worker_script():
    """Service worker kök scope'ta (/) kayıt edilebilsin diye kökten sunulur."""
    return FileResponse(
        STATIC_DIR / "sw.js",
        media_type="application/javascript",
        headers={"Service-Worker-Allowed": "/", "Cache-Control": "no-cache"},
    )


@app.get("/health")
def health(request: Request):
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        log.warning("health: database check failed: %s", e)
        database = "error"
    stats = getattr(request.app.state, "delivery_stats", None)
    return {
        "status": "ok",
        "database": database,
        "vapid_configured": is_vapid_configured(),
        "push": stats.snapshot() if stats else {},
    }
