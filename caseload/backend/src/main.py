"""Entrypoint for the FastAPI application."""

import os

from dotenv import load_dotenv

# Load .env locally only; deployed environments inject variables directly
env_path = os.path.join(os.path.dirname(__file__), "../.env")
if os.path.exists(env_path):
    load_dotenv(dotenv_path=os.path.abspath(env_path))

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import due_date_items, health, progress_reports, timesheet_notes
from .core.errors import ParseError
from .core.logging import configure_logging

LOGGER = structlog.get_logger(__name__)


async def _parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
    LOGGER.warning(
        "request_parse_error",
        path=request.url.path,
        field=exc.field,
        value=str(exc.value),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "field": exc.field, "value": str(exc.value)},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Caseload Timesheet Engine", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ParseError, _parse_error_handler)

    app.include_router(health.router, prefix="/api")
    app.include_router(timesheet_notes.router, prefix="/api")
    app.include_router(due_date_items.router, prefix="/api")
    app.include_router(progress_reports.router, prefix="/api")

    return app


app = create_app()
