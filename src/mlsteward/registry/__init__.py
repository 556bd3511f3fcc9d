"""Model registry clients."""

from mlsteward.registry.model_registry_client import ModelRegistryClient
from mlsteward.registry.model_version_client import ModelVersionClient

__all__ = ["ModelRegistryClient", "ModelVersionClient"]
