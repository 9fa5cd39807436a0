import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from passwatch.app.api.v1.router import api_router
from passwatch.app.core.clock import system_clock
from passwatch.app.core.config import settings
from passwatch.app.core.errors import PassWatchError, PersistenceFailure
from passwatch.app.db import init_models
from passwatch.app.db.base import AsyncSessionLocal
from passwatch.app.services.background import BackgroundRunner
from passwatch.app.services.email import EmailService
from passwatch.app.services.login_ip import LoginAlertNotifier
from passwatch.app.services.throttle import NotificationThrottle

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("passwatch")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info(
        f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})",
        extra={"event": "startup", "email_enabled": settings.email_enabled},
    )
    yield
    # Let in-flight login alerts finish before the loop goes away
    await app.state.background.drain()
    app.state.throttle.clear()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Process-wide components shared by every request
app.state.clock = system_clock
app.state.session_factory = AsyncSessionLocal
app.state.throttle = NotificationThrottle(settings.NOTIFICATION_THROTTLE_SECONDS)
app.state.login_notifier = LoginAlertNotifier(app.state.throttle, EmailService(), app.state.clock)
app.state.background = BackgroundRunner(logging.getLogger("passwatch.background"))

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(PassWatchError)
async def passwatch_error_handler(request: Request, exc: PassWatchError):
    if isinstance(exc, PersistenceFailure):
        logger.error(
            str(exc),
            extra={"event": "persistence_failure", "path": request.url.path},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.public_message},
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}
