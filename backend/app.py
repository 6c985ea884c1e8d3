import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.routes import router
from dolmenwood.config import Settings, load_settings
from dolmenwood.dashboard import Dashboard
from dolmenwood.storage import (
    HealthReport,
    LocalAuthService,
    LocalStore,
    StorageError,
    Subscription,
    start_periodic_health_check,
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, dashboard: Dashboard | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)
    auth = LocalAuthService(LocalStore(settings.data_dir))
    if dashboard is None:
        dashboard = Dashboard.from_settings(settings, identity=auth)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async def on_auth_change(user):
            await dashboard.init()

        def on_status_change(report: HealthReport):
            logger.info("Cloud store %s: %s", report.status, report.message)

        if dashboard.cloud is not None:
            watchdog = await start_periodic_health_check(
                dashboard.cloud, on_status_change, settings.health_interval, settings.health_timeout
            )
        else:
            watchdog = Subscription.noop(label="health")

        # Fires once immediately, so storage is initialised before serving.
        async with watchdog, await auth.on_auth_state_changed(on_auth_change):
            yield
        await dashboard.close()

    app = FastAPI(title="Dolmenwood Dashboard", lifespan=lifespan)
    app.state.settings = settings
    app.state.auth = auth
    app.state.dashboard = dashboard

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error("Unsaved write on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.include_router(router, prefix="/api")
    return app
