"""Custom exception hierarchy for the RAG gateway."""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for all gateway errors."""


class InvalidRequestError(GatewayError):
    """The client request is missing required fields or is malformed."""


class UpstreamError(GatewayError):
    """Error while talking to the generation backend."""

    def __init__(
        self, message: str, status_code: int | None = None, detail: object = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail if detail is not None else message


class EndpointMismatchError(UpstreamError):
    """The backend does not expose the generation endpoint shape we called."""


class UpstreamUnavailableError(UpstreamError):
    """The backend could not be reached or timed out."""


class UpstreamResponseError(UpstreamError):
    """The backend answered with an error status or an unreadable body."""


class DocumentStoreError(GatewayError):
    """Error talking to the document store."""


class DocumentStoreUnavailableError(DocumentStoreError):
    """The document store did not answer its liveness probe."""
