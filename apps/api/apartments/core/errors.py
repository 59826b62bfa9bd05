"""Error kinds raised by registry and lifecycle operations."""
from __future__ import annotations

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ApartmentError(HTTPException):
    """Base class for every rejected apartment operation.

    Subclasses carry the HTTP status they map to so services can raise them
    directly, the same way they would raise ``HTTPException``.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=type(self).status_code, detail=detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class NotFound(ApartmentError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateIdentifier(ApartmentError):
    status_code = status.HTTP_409_CONFLICT


class Unauthorized(ApartmentError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidState(ApartmentError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientPayment(ApartmentError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class NoFundsAvailable(ApartmentError):
    status_code = status.HTTP_409_CONFLICT


class BalanceLimitExceeded(ApartmentError):
    status_code = status.HTTP_409_CONFLICT


class TransferFailed(ApartmentError):
    status_code = status.HTTP_502_BAD_GATEWAY


async def apartment_error_handler(request: Request, exc: ApartmentError) -> JSONResponse:
    """Render domain errors with their kind alongside the usual ``detail``."""

    _ = request
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.kind})
