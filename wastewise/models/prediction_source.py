"""
Prediction source backed by a hosted image-classification model
Posts raw image bytes to a Hugging Face style inference endpoint and
returns the model's (label, score) pairs
"""

import json
import logging
from typing import Any, List, Optional

import requests

from ..exceptions import (
    AuthorizationError,
    MalformedResponseError,
    ModelLoadingError,
    PredictionSourceError,
    UpstreamError,
)
from ..utils.retry import RetryPolicy
from .disposal_classifier import Prediction

DEFAULT_API_URL = "https://api-inference.huggingface.co/models/google/vit-base-patch16-224"
LOADING_MARKER = "is currently loading"


class PredictionSource:
    """
    HTTP client for the remote vision model

    Retries while the model is loading (fixed delay) and on generic HTTP or
    network failures (doubling delay). Authorization failures and malformed
    responses are raised immediately.
    """

    def __init__(self, api_token: Optional[str], api_url: str = DEFAULT_API_URL,
                 timeout: float = 30.0, max_attempts: int = 3,
                 loading_delay_seconds: float = 5.0, base_delay_seconds: float = 1.0,
                 session: Optional[requests.Session] = None, sleep=None):
        """
        Initialize prediction source

        Args:
            api_token: Bearer token for the inference API
            api_url: Model endpoint URL
            timeout: Per-request timeout in seconds
            max_attempts: Total attempts per image, including the first
            loading_delay_seconds: Wait between attempts while the model loads
            base_delay_seconds: First delay of the doubling backoff for other failures
            session: Optional requests session (shared connection pool)
            sleep: Optional delay function, mainly for tests
        """
        self.api_token = api_token
        self.api_url = api_url
        self.timeout = timeout
        self.loading_delay = loading_delay_seconds
        self.base_delay = base_delay_seconds
        self.session = session or requests.Session()

        policy_kwargs = {}
        if sleep is not None:
            policy_kwargs["sleep"] = sleep
        self.retry_policy = RetryPolicy(
            max_attempts=max_attempts,
            backoff=self._backoff,
            retryable=self._is_retryable,
            **policy_kwargs,
        )

        self.setup_logging()

    def setup_logging(self):
        """Setup logging for the prediction source"""
        self.logger = logging.getLogger(__name__)

    def _backoff(self, attempt: int, error: BaseException) -> float:
        if isinstance(error, ModelLoadingError):
            return self.loading_delay
        return self.base_delay * (2 ** attempt)

    @staticmethod
    def _is_retryable(error: BaseException) -> bool:
        if isinstance(error, (AuthorizationError, UpstreamError, MalformedResponseError)):
            return False
        return isinstance(error, PredictionSourceError)

    def fetch_predictions(self, image_bytes: bytes, mime_type: str) -> List[Prediction]:
        """
        Classify an image with the remote model

        Args:
            image_bytes: Encoded image (PNG, JPEG...)
            mime_type: MIME type sent as Content-Type

        Returns:
            Predictions in the order the model returned them

        Raises:
            AuthorizationError: Token missing or rejected
            UpstreamError: Model answered with an error payload
            MalformedResponseError: Response body has an unexpected shape
            PredictionSourceError: Network/HTTP failure after all attempts
        """
        if not self.api_token:
            raise AuthorizationError(
                "Hugging Face API token is missing. Set HF_API_TOKEN in the environment or .env file."
            )

        predictions = self.retry_policy.call(self._post_image, image_bytes, mime_type)
        self.logger.info(f"Received {len(predictions)} predictions from model")
        return predictions

    def _post_image(self, image_bytes: bytes, mime_type: str) -> List[Prediction]:
        """Single request attempt"""
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": mime_type,
        }

        try:
            response = self.session.post(
                self.api_url, data=image_bytes, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise PredictionSourceError(f"Request to model failed: {e}") from e

        if response.status_code == 401:
            raise AuthorizationError(
                "401 Unauthorized: Please verify your Hugging Face API token is correct.",
                status_code=401,
            )

        if not response.ok:
            details = self._safe_json(response)
            error_message = details.get("error") if isinstance(details, dict) else None
            if isinstance(error_message, str) and LOADING_MARKER in error_message:
                raise ModelLoadingError(error_message, status_code=response.status_code)
            raise PredictionSourceError(
                f"HTTP error! Status: {response.status_code}. "
                f"Details: {json.dumps(details)[:100]}...",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Classification failed: Received an unexpected response format from the model."
            ) from e

        return self._parse_predictions(body)

    @staticmethod
    def _safe_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _parse_predictions(body: Any) -> List[Prediction]:
        """Validate the 200 response body and convert it to predictions"""
        if isinstance(body, dict) and "error" in body:
            raise UpstreamError(f"Hugging Face API Error: {body['error']}")

        if not isinstance(body, list):
            raise MalformedResponseError(
                "Classification failed: Received an unexpected response format from the model."
            )

        predictions = []
        for entry in body:
            if (not isinstance(entry, dict)
                    or not isinstance(entry.get("label"), str)
                    or isinstance(entry.get("score"), bool)
                    or not isinstance(entry.get("score"), (int, float))):
                raise MalformedResponseError(f"Unexpected prediction entry: {str(entry)[:100]}")
            try:
                predictions.append(Prediction.from_dict(entry))
            except (TypeError, ValueError, OverflowError) as e:
                raise MalformedResponseError(f"Unexpected prediction score: {str(entry)[:100]}") from e

        return predictions

    def close(self):
        """Release the underlying HTTP connection pool"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
