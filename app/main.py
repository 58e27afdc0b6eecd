import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import settings
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.admin_auth import routes as admin_auth_routes
from app.modules.users import routes as users_routes
from app.modules.supabase_config import routes as supabase_config_routes
from app.modules.projects import routes as projects_routes
from app.modules.webhooks import routes as webhooks_routes
from app.modules.chat import routes as chat_routes
from app.modules.agents import routes as agents_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return JSONResponse(status_code=500, content={"error": str(exc)})


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
                    (b"X-XSS-Protection", b"1; mode=block"),
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
app.include_router(auth_routes.router, prefix="/api")
app.include_router(admin_auth_routes.router, prefix="/api")
app.include_router(users_routes.router, prefix="/api")
app.include_router(supabase_config_routes.router, prefix="/api")
app.include_router(projects_routes.router, prefix="/api")
app.include_router(webhooks_routes.router, prefix="/api")
app.include_router(chat_routes.router, prefix="/api")
app.include_router(agents_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    app.state.session_cleanup_task = None
    if settings.session_cleanup_interval_seconds > 0:
        from app.modules.sessions.cleanup_scheduler import session_cleanup_loop
        app.state.session_cleanup_task = asyncio.create_task(session_cleanup_loop())
        logger.info(
            f"Session cleanup started - sweeping expired sessions every "
            f"{settings.session_cleanup_interval_seconds}s"
        )


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")

    task = getattr(app.state, "session_cleanup_task", None)
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        app.state.session_cleanup_task = None
        logger.info("Session cleanup stopped")


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
    """Readiness check: extend here with a database check if needed."""
    return {"status": "ready"}
