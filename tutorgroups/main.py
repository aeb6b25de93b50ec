"""Tutoring groups - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError

from tutorgroups.api import assistants, groups, students
from tutorgroups.config import Settings, settings as default_settings
from tutorgroups.db import db_shutdown, db_startup
from tutorgroups.errors import TutoringError, Unauthorized
from tutorgroups.services import build_services
from tutorgroups.services.auth import AuthorizationGate
from tutorgroups.store import AggregateStore

logger = logging.getLogger(__name__)


def create_app(store: Optional[AggregateStore] = None, config: Settings = default_settings) -> FastAPI:
    """Build the app. Without a store, one is opened from settings at startup."""
    logging.basicConfig(level=config.log_level.upper())
    gate = AuthorizationGate(
        config.jwt_secret_key,
        config.jwt_algorithm,
        config.jwt_access_token_expire_minutes,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is None:
            try:
                app.state.services = build_services(await db_startup(config), gate)
            except ServerSelectionTimeoutError as e:
                logger.error("MongoDB is not reachable at %s", config.mongodb_url)
                raise RuntimeError("MongoDB connection failed. Start MongoDB or set STORE_BACKEND=memory.") from e
        yield
        await db_shutdown()

    app = FastAPI(
        title=config.app_name,
        description="Tutoring groups: attendance rounds and payment ledgers",
        version="0.1.0",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.services = build_services(store, gate)

    @app.exception_handler(TutoringError)
    async def tutoring_exception_handler(request: Request, exc: TutoringError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"kind": "ValidationError", "detail": exc.errors()},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in config.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])
    app.include_router(assistants.router, prefix="/api/assistants", tags=["Assistants"])

    @app.get("/health")
    def health():
        return {"status": "ok", "app": config.app_name}

    return app


app = create_app()
