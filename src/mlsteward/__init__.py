"""
mlsteward - MLflow tracking server client with run housekeeping workflows.

This module exposes the REST clients for runs, experiments and the model
registry, plus workflows that clean up, copy and summarize runs.

Examples:
    >>> from mlsteward import Mlflow
    >>> mlflow = Mlflow("http://localhost:5000")
    >>> preview = mlflow.run_manager.cleanup_runs(["1"], "metrics.acc > 0.9", "acc")
    >>> copied = mlflow.run_manager.copy_run("abc123", target_experiment_id="2")
"""

from mlsteward.client import Mlflow
from mlsteward.config import ClientSettings, get_settings
from mlsteward.exceptions import ApiError, ModelVersionNotFoundError, RunNotFoundError
from mlsteward.registry import ModelRegistryClient, ModelVersionClient
from mlsteward.tracking import ExperimentClient, RunClient, TrackingHttpClient
from mlsteward.workflows import ExperimentManager, ModelManager, RunManager

__version__ = "0.1.0"
__all__ = [
    "ApiError",
    "ClientSettings",
    "ExperimentClient",
    "ExperimentManager",
    "Mlflow",
    "ModelManager",
    "ModelRegistryClient",
    "ModelVersionClient",
    "ModelVersionNotFoundError",
    "RunClient",
    "RunManager",
    "RunNotFoundError",
    "TrackingHttpClient",
    "get_settings",
]
