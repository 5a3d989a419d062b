import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from wardrounds.config import Settings, get_settings
from wardrounds.database import build_engine, build_session_factory
from wardrounds.auth import DoctorPrincipal, get_current_doctor
from wardrounds.routers import ranap, notifications
from wardrounds.routers import auth as auth_router
from wardrounds.services.notification_service import NotificationDispatcher
from wardrounds.time_utils import local_now

logger = logging.getLogger(__name__)

SERVICE_NAME = "RS Bumi Waras - DPJP API"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.environment == "development" else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def start_notification_worker(app: FastAPI) -> Optional[asyncio.Task]:
    settings: Settings = app.state.settings
    if not settings.notification_worker_enabled:
        logger.info("Notification worker disabled")
        return None
    if not settings.onesignal_configured:
        logger.warning("ONESIGNAL_APP_ID or ONESIGNAL_API_KEY is not set; notifications will not be sent")
        return None
    dispatcher = NotificationDispatcher(app.state.session_factory, settings)
    return asyncio.create_task(dispatcher.run_forever(settings.notification_poll_interval))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the worker shares the request handlers' connection pool
    worker = start_notification_worker(app)
    app.state.notification_worker = worker
    yield
    # Shutdown
    if worker is not None:
        worker.cancel()
        with suppress(asyncio.CancelledError):
            await worker
    await app.state.engine.dispose()


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message, **extra})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Ward Rounds API",
        description="DPJP inpatient roster, CPPT status and push notifications",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body", errors=jsonable_errors(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "Internal server error")

    app.include_router(auth_router.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(ranap.router, prefix="/api/v1/ranap", tags=["Ranap"])
    app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["Notifications"])

    @app.get("/")
    async def root():
        return {
            "service": SERVICE_NAME,
            "status": "running",
            "time": local_now(settings).strftime("%Y-%m-%d %H:%M:%S"),
        }

    @app.get("/api/v1/health")
    async def health_check():
        return {"status": "success", "message": "API is running"}

    @app.get("/api/v1/profile")
    async def token_profile(current_doctor: DoctorPrincipal = Depends(get_current_doctor)):
        return {
            "status": "success",
            "data": {"id_user": current_doctor.id_user, "kd_dokter": current_doctor.kd_dokter},
        }

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


app = create_app()


def serve() -> None:
    import uvicorn

    settings = get_settings()
    logger.info("Starting server on 0.0.0.0:%s", settings.server_port)
    uvicorn.run("wardrounds.main:app", host="0.0.0.0", port=settings.server_port)
