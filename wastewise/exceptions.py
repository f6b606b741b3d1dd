"""Custom exceptions for the WasteWise assistant."""

from typing import Optional


class WasteWiseError(RuntimeError):
    """Base class for domain-specific runtime errors."""


class PredictionSourceError(WasteWiseError):
    """Raised when the remote classification model cannot serve a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModelLoadingError(PredictionSourceError):
    """Raised while the upstream model is still loading."""


class AuthorizationError(PredictionSourceError):
    """Raised when the API token is missing or rejected."""


class UpstreamError(PredictionSourceError):
    """Raised when the model answers with an explicit error payload."""


class MalformedResponseError(PredictionSourceError):
    """Raised when the model response does not have the expected shape."""


class CameraError(WasteWiseError):
    """Raised when no camera source can be opened."""
