import logging

from fastapi import FastAPI, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..modules.payments.providers import ProviderError

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields"


def provider_http_error(exc: ProviderError, message: str) -> HTTPException:
    """500 carrying the vendor's own error payload."""
    logger.error("%s: %s (vendor status=%s)", message, exc.message, exc.status_code)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": exc.payload},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_, exc: RequestValidationError):  # type: ignore[override]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": MISSING_FIELDS_MESSAGE, "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ProviderError)
    async def provider_exception_handler(_, exc: ProviderError):  # type: ignore[override]
        # Routes translate provider errors themselves; this catches the rest
        logger.error("Unhandled %s provider error: %s", exc.provider, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"message": exc.message, "error": jsonable_encoder(exc.payload)}},
        )
