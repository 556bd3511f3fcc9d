"""Facade bundling every client and workflow around one tracking server."""

from __future__ import annotations

from mlsteward.config import ClientSettings, get_settings
from mlsteward.registry import ModelRegistryClient, ModelVersionClient
from mlsteward.tracking import ExperimentClient, RunClient, TrackingHttpClient
from mlsteward.workflows import ExperimentManager, ModelManager, RunManager


class Mlflow:
    """Entry point exposing the clients and workflows for one tracking server.

    All components share a single HTTP session.

    Examples:
        >>> mlflow = Mlflow("http://localhost:5000")
        >>> result = mlflow.run_manager.cleanup_runs(["1"], "metrics.acc > 0.9", "acc")
        >>> deleted_ids = result.deleted_run_ids
    """

    def __init__(self, tracking_uri: str | None = None, settings: ClientSettings | None = None) -> None:
        settings = settings or get_settings()
        if tracking_uri is not None:
            settings = settings.model_copy(update={"tracking_uri": ClientSettings(tracking_uri=tracking_uri).tracking_uri})
        self.settings = settings

        self.http = TrackingHttpClient.from_settings(settings)
        self.run_client = RunClient(self.http)
        self.experiment_client = ExperimentClient(self.http)
        self.model_registry_client = ModelRegistryClient(self.http)
        self.model_version_client = ModelVersionClient(self.http)

        self.run_manager = RunManager(self.run_client, self.model_version_client, page_size=settings.search_page_size)
        self.experiment_manager = ExperimentManager(self.experiment_client, self.run_client)
        self.model_manager = ModelManager(self.model_registry_client, self.model_version_client, self.run_client)

    @property
    def tracking_uri(self) -> str:
        return self.settings.tracking_uri

    def get_run_client(self) -> RunClient:
        return self.run_client

    def get_experiment_client(self) -> ExperimentClient:
        return self.experiment_client

    def get_model_registry_client(self) -> ModelRegistryClient:
        return self.model_registry_client

    def get_model_version_client(self) -> ModelVersionClient:
        return self.model_version_client

    def get_run_manager(self) -> RunManager:
        return self.run_manager

    def get_experiment_manager(self) -> ExperimentManager:
        return self.experiment_manager

    def get_model_manager(self) -> ModelManager:
        return self.model_manager

    def close(self) -> None:
        """Close the shared HTTP session."""
        self.http.close()

    def __enter__(self) -> Mlflow:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
