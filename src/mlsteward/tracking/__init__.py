"""Tracking clients: runs and experiments."""

from mlsteward.tracking._http import TrackingHttpClient
from mlsteward.tracking.experiment_client import ExperimentClient
from mlsteward.tracking.run_client import RunClient

__all__ = ["ExperimentClient", "RunClient", "TrackingHttpClient"]
