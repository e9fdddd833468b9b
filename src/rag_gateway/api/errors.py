"""Translation of gateway exceptions into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from rag_gateway.exceptions import (
    DocumentStoreUnavailableError,
    GatewayError,
    InvalidRequestError,
    UpstreamError,
)


def to_http_exception(error: GatewayError) -> HTTPException:
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, DocumentStoreUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, UpstreamError):
        code = error.status_code if error.status_code and error.status_code >= 400 else 500
        return HTTPException(
            status_code=code,
            detail={"error": str(error), "details": error.detail},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
