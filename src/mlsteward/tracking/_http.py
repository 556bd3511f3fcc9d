"""HTTP transport shared by every mlsteward client."""

from __future__ import annotations

import math
from typing import Any

import requests

from mlsteward.config import ClientSettings, get_settings
from mlsteward.exceptions import ApiError
from mlsteward.logger import logger

API_PREFIX = "/api/2.0/mlflow"


def _drop_none(body: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None; the server rejects explicit nulls."""
    return {key: value for key, value in body.items() if value is not None}


def _encode_non_finite(value: Any) -> Any:
    """Replace NaN and infinities with "NaN", "Infinity" and "-Infinity".

    requests serializes bodies with ``allow_nan=False``; the server parses these strings back to floats.
    """
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, dict):
        return {key: _encode_non_finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode_non_finite(item) for item in value]
    return value


class TrackingHttpClient:
    """Issues one request per call against the MLflow REST API."""

    def __init__(self, base_url: str, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        """Initialize the transport.

        Args:
            base_url: Base URL of the tracking server (e.g., "http://localhost:5000")
            timeout: Timeout for each request in seconds
            session: Optional pre-configured session (shared connection pool)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> TrackingHttpClient:
        settings = settings or get_settings()
        return cls(settings.tracking_uri, timeout=settings.request_timeout)

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{API_PREFIX}/{endpoint.lstrip('/')}"

    def call(
        self,
        method: str,
        endpoint: str,
        context: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the parsed JSON body.

        Args:
            method: HTTP method ("GET", "POST", "PATCH", "DELETE")
            endpoint: Endpoint path below ``/api/2.0/mlflow/``, e.g. "runs/create"
            context: Description of the operation used to prefix error messages
            json: Request body; None values are dropped, non-finite floats become strings
            params: Query string parameters; None values are dropped

        Returns:
            Parsed JSON response (empty dict for an empty body).

        Raises:
            ApiError: If the server responds with a non-2xx status.
            requests.RequestException: If the HTTP request itself fails.
        """
        url = self.url_for(endpoint)
        logger.debug(f"{method} {url}")
        response = self.session.request(
            method,
            url,
            json=_encode_non_finite(_drop_none(json)) if json is not None else None,
            params=_drop_none(params) if params is not None else None,
            timeout=self.timeout,
        )

        data = self._parse_body(response)
        if not response.ok:
            message = data.get("message") or response.reason or "Unknown error"
            raise ApiError(f"{context}: {message}", response.status_code, error_code=data.get("error_code"))
        return data

    @staticmethod
    def _parse_body(response: requests.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def close(self) -> None:
        self.session.close()
