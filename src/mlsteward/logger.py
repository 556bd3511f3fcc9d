"""Logging configuration for mlsteward."""

import logging
import sys

from mlsteward.exceptions import ApiError

# Create logger for mlsteward
logger = logging.getLogger("mlsteward")


def setup_logger(level: int = logging.INFO) -> None:
    """Setup the mlsteward logger with default configuration.

    Args:
        level: Logging level (default: INFO)
    """
    if logger.handlers:
        # Already configured
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("mlsteward: %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def log_workflow_error(error: Exception) -> None:
    """Log a failed workflow step before it is re-raised.

    Args:
        error: The exception raised by a client call
    """
    if isinstance(error, ApiError):
        logger.error(f"API Error ({error.status_code}): {error.message}")
    else:
        logger.error(f"An unexpected error occurred: {error}")


# Initialize logger on import
setup_logger()
