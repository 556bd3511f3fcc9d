"""
mlsteward exceptions module.

Contains exception classes shared by the HTTP clients and the workflows.
"""

from __future__ import annotations


class ApiError(Exception):
    """Raised when the tracking server answers with a non-2xx status.

    Attributes:
        message: Human readable message, prefixed with the failing operation
        status_code: HTTP status code returned by the server
        error_code: MLflow error code (e.g. ``RESOURCE_DOES_NOT_EXIST``) if the body carried one
    """

    def __init__(self, message: str, status_code: int, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


class RunNotFoundError(Exception):
    """Exception raised when a workflow finds no run to act on."""

    pass


class ModelVersionNotFoundError(Exception):
    """Exception raised when a registered model has no version to act on."""

    pass
