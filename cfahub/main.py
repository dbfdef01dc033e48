import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from cfahub.config import settings
from cfahub.core.dependencies import get_locale
from cfahub.core.errors import ContentValidationError, validation_failure
from cfahub.modules.auth import routes as auth_routes
from cfahub.modules.groups import routes as groups_routes
from cfahub.modules.folders import routes as folders_routes
from cfahub.modules.tags import routes as tags_routes
from cfahub.modules.content import routes as content_routes
from cfahub.modules.quizzes import routes as quizzes_routes
from cfahub.modules.flashcards import routes as flashcards_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ContentValidationError)
async def content_validation_handler(request: Request, exc: ContentValidationError):
    error = validation_failure(exc, get_locale(request))
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"same-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(groups_routes.router, prefix="/api/v1")
app.include_router(folders_routes.router, prefix="/api/v1")
app.include_router(tags_routes.router, prefix="/api/v1")
for content_router in content_routes.routers:
    app.include_router(content_router, prefix="/api/v1")
app.include_router(content_routes.dashboard_router, prefix="/api/v1")
app.include_router(quizzes_routes.router, prefix="/api/v1")
app.include_router(flashcards_routes.router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: configuration is loaded and a Supabase URL is set."""
    if not settings.supabase_url:
        return JSONResponse(status_code=503, content={"status": "not ready", "detail": "SUPABASE_URL is not set"})
    return {"status": "ready"}
