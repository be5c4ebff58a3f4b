"""Exception handlers that keep every failure inside the JSON envelope."""

import asyncio
import logging
import sys
import threading
import traceback
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config.logging import DiagnosticLog

logger = logging.getLogger(__name__)

TRACEBACK_LIMIT = 1000


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
    return error_response(422, f"Invalid request body: {exc.errors()}")


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return error_response(500, str(exc) or type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def _format_traceback(exc_type, exc, tb) -> str:
    return "".join(traceback.format_exception(exc_type, exc, tb))[:TRACEBACK_LIMIT]


def install_process_handlers(log: DiagnosticLog) -> Callable[[], None]:
    """Route uncaught exceptions into the diagnostic log instead of stderr.

    Returns a callable that puts the previous hooks back.
    """
    previous_excepthook = sys.excepthook
    previous_thread_excepthook = threading.excepthook

    def _excepthook(exc_type, exc, tb) -> None:
        log.write("UncaughtException:", str(exc), _format_traceback(exc_type, exc, tb))

    def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
        log.write(
            "UncaughtException:",
            str(args.exc_value),
            _format_traceback(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        previous_loop_handler = loop.get_exception_handler()

        def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
            exc = context.get("exception")
            if exc is None:
                log.write("UnhandledRejection:", context.get("message", ""))
                return
            log.write(
                "UnhandledRejection:",
                str(exc),
                _format_traceback(type(exc), exc, exc.__traceback__),
            )

        loop.set_exception_handler(_loop_exception_handler)

    def restore() -> None:
        sys.excepthook = previous_excepthook
        threading.excepthook = previous_thread_excepthook
        if loop is not None and not loop.is_closed():
            loop.set_exception_handler(previous_loop_handler)

    return restore
