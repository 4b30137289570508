import logging
from typing import Optional

from fastapi import FastAPI

from api.errors import register_exception_handlers
from api.routers import auth, notes, ops, tasks
from api.settings import Settings
from api.state import Services, build_services

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the application.

    When `services` is given (tests, embedding) it is used as-is and left open
    on shutdown; otherwise services are built from `settings` at startup and
    closed at shutdown.
    """
    settings = settings or (services.settings if services else Settings.from_env())

    app = FastAPI(title="Task Organizer API")
    app.state.services = services

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(notes.router, prefix="/api/notes", tags=["notes"])
    app.include_router(ops.router, tags=["ops"])
    register_exception_handlers(app)

    owns_services = services is None

    @app.on_event("startup")
    async def startup() -> None:
        if app.state.services is None:
            app.state.services = await build_services(settings)
        logger.info(
            f"Task Organizer started (storage={settings.storage_backend}, llm={settings.llm_provider})"
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:
        if owns_services and app.state.services is not None:
            await app.state.services.close()
            app.state.services = None
        logger.info("Task Organizer stopped")

    return app


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


_settings = Settings.from_env()
_configure_logging(_settings.log_level)
app = create_app(_settings)


if __name__ == "__main__":
    import os

    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
