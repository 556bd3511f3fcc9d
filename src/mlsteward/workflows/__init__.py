"""Higher-level workflows built on the tracking and registry clients."""

from mlsteward.workflows.experiment_manager import ExperimentManager
from mlsteward.workflows.model_manager import ModelManager
from mlsteward.workflows.run_manager import RunManager

__all__ = ["ExperimentManager", "ModelManager", "RunManager"]
