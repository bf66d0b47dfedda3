"""FastAPI application for the SBWC assistant API.

Run with ``uvicorn sbwc_assistant.adapters.inbound.api.main:app`` or
``sbwc serve``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .... import __version__
from ....config.logging import setup_logging
from ....config.settings import settings
from ....core.domain.exceptions import AssistantError
from ...common.exception_handler import (
    format_exception_json,
    get_http_status_code,
    log_exception,
)
from .routers import chat, health

setup_logging(settings.log_level, log_file=settings.log_file, json_format=settings.log_json)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SBWC Assistant API",
    description=(
        "Retrieval-augmented chat over State Board of Workers' Compensation documents, "
        "with time-limited links to the cited source PDFs."
    ),
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chat.router)


@app.exception_handler(AssistantError)
@app.exception_handler(Exception)
async def structured_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render errors that escape a route as structured JSON.

    Errors inside a chat turn never reach here; they are reported on the
    answer stream. This covers wiring failures such as missing credentials.
    """
    log_exception(exc, log=logger, extra_context={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=get_http_status_code(exc),
        content=format_exception_json(exc, include_trace=settings.debug),
    )
