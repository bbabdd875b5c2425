"""
FastAPI backend: contacts REST API.
Run with uvicorn: uvicorn api.main:app --reload  (or: python -m api)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.contacts import router as contacts_router
from contactbook.application import ContactRepository, ContactService
from contactbook.config import Settings, load_settings
from contactbook.infrastructure import Neo4jContactRepository, ensure_contact_schema

logger = logging.getLogger(__name__)


def _get_driver(settings: Settings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    driver = None
    # A repository injected by create_app (tests, local runs) skips Neo4j entirely.
    if getattr(app.state, "contact_service", None) is None:
        logger.info("Connecting to Neo4j at %s", settings.neo4j_uri)
        driver = _get_driver(settings)
        try:
            ensure_contact_schema(driver, database=settings.neo4j_database)
        except Exception:
            driver.close()
            raise
        repo = Neo4jContactRepository(driver, database=settings.neo4j_database)
        app.state.contact_service = ContactService(repo)
    try:
        yield
    finally:
        if driver is not None:
            driver.close()
            app.state.contact_service = None
            logger.info("Neo4j driver closed")


def _field_name(loc: tuple) -> str:
    # ("body", "email") -> "email"; ("body",) -> "body"
    parts = [str(p) for p in loc[1:]] or [str(p) for p in loc]
    return ".".join(parts)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation error", "errors": errors},
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    settings: Settings | None = None,
    repository: ContactRepository | None = None,
) -> FastAPI:
    """Build the app. Without a repository, the lifespan opens Neo4j from settings."""
    settings = settings or load_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level,
    )

    app = FastAPI(title="Contactbook API", debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.contact_service = ContactService(repository) if repository is not None else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.include_router(contacts_router)

    @app.get("/")
    def root():
        return {"message": "Welcome to Contactbook API"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
