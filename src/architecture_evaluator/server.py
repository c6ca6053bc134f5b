"""
ASGI server for the Architecture Evaluator.

A Starlette application exposing the analysis service over HTTP, served by
Uvicorn:

- POST /analyze  evaluate a description or structured record
- GET  /health   liveness check

CORS middleware answers browser preflight requests. Errors are returned as
{"error": message} with 400 for invalid requests, 422 for malformed records
and 502 when no language-model provider could answer. Any other failure is
logged and answered with 500.
"""

import json
import logging
from typing import Optional, Sequence

import uvicorn
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .app_logging import get_logger
from .errors import EvaluatorError, InvalidRequest, MalformedInput, UpstreamUnavailable
from .service import AnalysisService

logger = get_logger('server')

# Uvicorn logging configuration to match our structured logging format
UVICORN_LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
        "access": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO"},
        "uvicorn.error": {"level": "INFO"},
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
    },
}

ERROR_STATUS = {
    InvalidRequest: 400,
    MalformedInput: 422,
    UpstreamUnavailable: 502,
}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def evaluator_error(_: Request, exc: Exception) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 500)
    message = exc.message if isinstance(exc, EvaluatorError) else str(exc)
    if status_code >= 500:
        logger.warning(f"Analysis failed ({status_code}): {message}")
    else:
        logger.info(f"Rejected request ({status_code}): {message}")
    return error_response(message, status_code)


async def unexpected_error(_: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error during analysis: {exc!r}")
    return error_response("Internal server error", 500)


async def health_check(_: Request) -> JSONResponse:
    logger.debug("Health check requested")
    return JSONResponse({"status": "ok"})


def create_app(
    service: AnalysisService,
    cors_origins: Optional[Sequence[str]] = None,
) -> Starlette:
    """
    Build the ASGI application.

    Args:
        service: Analysis service handling /analyze requests
        cors_origins: Allowed browser origins (all origins if omitted)

    Returns:
        Starlette application
    """
    async def analyze(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRequest(f"Request body is not valid JSON: {e}") from e

        # Decomposition and explanation block on network I/O
        response = await run_in_threadpool(service.analyze_payload, payload)
        return JSONResponse(response.model_dump(mode="json"))

    routes = [
        Route('/analyze', analyze, methods=['POST']),
        Route('/health', health_check, methods=['GET']),
    ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=list(cors_origins) if cors_origins else ["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    ]

    return Starlette(
        routes=routes,
        middleware=middleware,
        exception_handlers={EvaluatorError: evaluator_error, Exception: unexpected_error},
    )


def run_server(
    service: AnalysisService,
    host: str = '127.0.0.1',
    port: int = 8000,
    cors_origins: Optional[Sequence[str]] = None,
    log_level: str = 'INFO',
) -> None:
    """Serve the application with Uvicorn until interrupted."""
    app = create_app(service, cors_origins)

    # Clear any existing uvicorn logger handlers to prevent duplicates
    for logger_name in ['uvicorn', 'uvicorn.error', 'uvicorn.access']:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = False

    log_config = json.loads(json.dumps(UVICORN_LOG_CONFIG))
    for name in ('uvicorn', 'uvicorn.error', 'uvicorn.access'):
        log_config["loggers"][name]["level"] = log_level.upper()

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=log_config)
