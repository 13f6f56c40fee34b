import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from backoffice import __version__
from backoffice.api.errors import register_exception_handlers
from backoffice.api.routers import health, menus, roles
from backoffice.core.config import Settings, get_settings
from backoffice.core.logger import configure_logging
from backoffice.db.session import create_session_factory, get_engine
from backoffice.db.startup import prepare_database

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the API application.

    The database is prepared (role migration, schema sync, seed) in the
    lifespan hook, before the first request is served.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        db_engine = engine or get_engine()
        app.state.session_factory = create_session_factory(db_engine)
        app.state.migration_report = prepare_database(db_engine, settings)
        logger.info("%s %s ready (role migration: %s)",
                    settings.app_name, __version__, app.state.migration_report.status.value)
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Back-office role, permission and menu administration",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(roles.router, prefix="/api/v1")
    app.include_router(menus.router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()
