"""FastAPI main application."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paralello import __version__
from paralello.api import automations, conversations, dispatches, messages, reports, suggestions, templates
from paralello.core.errors import ConfigurationError, StateError, ValidationError
from paralello.logging_setup import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Paralello Automation", version=__version__)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(automations.router, prefix="/api/automations", tags=["automations"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(dispatches.router, prefix="/api/dispatches", tags=["dispatches"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])
app.include_router(templates.router, prefix="/api/templates", tags=["templates"])
app.include_router(conversations.router, prefix="/api/conversations", tags=["conversations"])
app.include_router(messages.router, prefix="/api/clients", tags=["messages"])


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StateError)
async def state_error_handler(request: Request, exc: StateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}
