"""FastAPI application setup."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import asyncio
import hashlib
import logging
import time

from api.routes import assistant, auth, user
from api.routes.health import router as health_router
from config.logging_config import setup_logging
from config.settings import settings
from core.dependencies import init_dependencies, shutdown_dependencies
from core.errors import AssistantError
from database.client import init_supabase

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle. Missing classifier credentials abort startup."""
    init_supabase()
    init_dependencies()
    logger.info("Application started")
    yield
    await shutdown_dependencies()
    logger.info("Application shut down")


def _error_body(message: str, detail: str | None = None) -> dict:
    body = {"success": False, "message": message}
    if detail and settings.is_development:
        body["error"] = detail
    return body


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AssistantError)
    async def assistant_error_handler(request: Request, exc: AssistantError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.user_message, str(exc)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Voice Assistant API",
        description="Personal voice assistant: persona customization and intent classification",
        version="1.0.0",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # CORS: never combine allow_credentials=True with allow_origins=["*"]
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # In-process rate limiter (per-token or per-IP, per-minute, per path group).
    # Bounded dict with periodic eviction, sharded locks to reduce contention.
    # -----------------------------------------------------------------------
    _MAX_RATE_BUCKETS = 10_000
    _rate_buckets: dict[str, list[float]] = {}
    _last_eviction: float = time.time()
    _NUM_SHARDS = 16
    _rate_locks = [asyncio.Lock() for _ in range(_NUM_SHARDS)]
    _limits = {
        "assistant": (settings.AI_RATE_LIMIT_PER_MINUTE, "Too many AI requests, please wait a moment before trying again."),
        "auth": (settings.AUTH_RATE_LIMIT_PER_MINUTE, "Too many authentication attempts, please try again later."),
        "general": (settings.RATE_LIMIT_PER_MINUTE, "Too many requests, please try again later."),
    }

    def _path_group(path: str) -> str:
        if path.startswith("/assistant"):
            return "assistant"
        if path.startswith(("/auth/login", "/auth/register", "/auth/forgot-password")):
            return "auth"
        return "general"

    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        nonlocal _last_eviction

        if request.url.path.startswith("/health"):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        cookie_token = request.cookies.get("token", "")
        if auth_header.startswith("Bearer "):
            identity = "tok:" + hashlib.sha256(auth_header.encode()).hexdigest()[:16]
        elif cookie_token:
            identity = "tok:" + hashlib.sha256(cookie_token.encode()).hexdigest()[:16]
        else:
            client_ip = request.client.host if request.client else "unknown"
            identity = "ip:" + hashlib.sha256(client_ip.encode()).hexdigest()[:16]

        group = _path_group(request.url.path)
        limit, message = _limits[group]
        bucket_key = f"{group}:{identity}"

        shard_idx = hash(bucket_key) % _NUM_SHARDS
        async with _rate_locks[shard_idx]:
            now = time.time()

            # Periodic full eviction every 5 minutes to reclaim abandoned keys
            if now - _last_eviction > 300:
                stale_keys = [
                    k for k, v in _rate_buckets.items()
                    if not v or (now - v[-1]) > 120
                ]
                for k in stale_keys:
                    del _rate_buckets[k]
                if len(_rate_buckets) > _MAX_RATE_BUCKETS:
                    sorted_keys = sorted(
                        _rate_buckets,
                        key=lambda k: _rate_buckets[k][-1] if _rate_buckets[k] else 0,
                    )
                    for k in sorted_keys[: len(sorted_keys) // 2]:
                        del _rate_buckets[k]
                _last_eviction = now

            bucket = [t for t in _rate_buckets.get(bucket_key, []) if now - t < 60]
            if len(bucket) >= limit:
                return JSONResponse(
                    status_code=429,
                    content={"success": False, "message": message, "retryAfter": 60},
                )
            bucket.append(now)
            _rate_buckets[bucket_key] = bucket

        return await call_next(request)

    _register_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(user.router, prefix="/user", tags=["User"])
    app.include_router(assistant.router, prefix="/assistant", tags=["Assistant"])

    logger.info("FastAPI application created")
    return app
