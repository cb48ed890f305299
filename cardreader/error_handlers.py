# cardreader/error_handlers.py
# Maps card extraction errors onto HTTP responses

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import traceback

from cardreader.errors import CardReaderError, ErrorType
from cardreader.response_models import ErrorResponse, InternalServerErrorResponse

# Configure logger for error handling
error_logger = logging.getLogger("CardReader.ErrorHandler")

STATUS_MAP = {
    ErrorType.FILE_NOT_FOUND: 404,
    ErrorType.UNSUPPORTED_MEDIA_TYPE: 415,
    ErrorType.METADATA_ERROR: 404,
    ErrorType.MALFORMED_PAYLOAD: 422,
    ErrorType.INVALID_FORMAT: 422,
}

def status_for(error: CardReaderError) -> int:
    return STATUS_MAP.get(error.error_type, 500)

def handle_card_error(e: CardReaderError) -> HTTPException:
    """Convert a CardReaderError into an HTTPException carrying an ErrorResponse body."""
    error_logger.warning(f"Card error [{e.error_type.value}]: {e.message}")
    response = ErrorResponse(error=e.message, error_code=e.error_type.value)
    return HTTPException(status_code=status_for(e), detail=response.model_dump(mode='json'))

async def card_reader_exception_handler(request: Request, exc: CardReaderError) -> JSONResponse:
    """Global exception handler for card extraction errors."""
    error_logger.warning(f"Card error [{exc.error_type.value}] on {request.url.path}: {exc.message}")
    response = ErrorResponse(error=exc.message, error_code=exc.error_type.value)
    return JSONResponse(
        status_code=status_for(exc),
        content=response.model_dump(mode='json'),
        media_type="application/json"
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep HTTP errors in the ErrorResponse shape."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = ErrorResponse(
            error=str(exc.detail),
            error_code=f"HTTP_{exc.status_code}"
        ).model_dump(mode='json')

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        media_type="application/json"
    )

async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions."""
    error_logger.error(f"Unhandled exception: {str(exc)}")
    error_logger.error(traceback.format_exc())

    response = InternalServerErrorResponse(error="An unexpected error occurred")
    return JSONResponse(
        status_code=500,
        content=response.model_dump(mode='json'),
        media_type="application/json"
    )

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(CardReaderError, card_reader_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
