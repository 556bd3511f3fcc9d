"""Composite model registry workflows."""

from __future__ import annotations

from collections.abc import Sequence

from mlsteward.exceptions import ModelVersionNotFoundError, RunNotFoundError
from mlsteward.logger import log_workflow_error, logger
from mlsteward.models import ModelVersion, RegisteredModel, Run
from mlsteward.registry.model_registry_client import ModelRegistryClient
from mlsteward.registry.model_version_client import ModelVersionClient
from mlsteward.tracking.run_client import RunClient

# Filter value used to select runs that logged a metric at all
_METRIC_PRESENT_SENTINEL = -99999


class ModelManager:
    """Sequences registry and model-version calls into single operations.

    Operations on "the latest version" take the first entry returned by
    ``get-latest-versions`` and raise ModelVersionNotFoundError when the
    model has none. Nothing is rolled back when a later call fails.
    """

    def __init__(
        self,
        model_registry_client: ModelRegistryClient,
        model_version_client: ModelVersionClient,
        run_client: RunClient,
    ) -> None:
        self.model_registry_client = model_registry_client
        self.model_version_client = model_version_client
        self.run_client = run_client

    def _latest_version(self, name: str, action: str) -> str:
        versions = self.model_registry_client.get_latest_model_versions(name)
        if not versions:
            raise ModelVersionNotFoundError(f"Model has no version to {action}.")
        return versions[0].version

    def create_registered_model_with_version(
        self,
        name: str,
        version_source: str,
        version_run_id: str | None = None,
    ) -> ModelVersion:
        """Create a registered model and its first version.

        If version creation fails the registered model already exists and is kept.

        Args:
            name: Name of the registered model
            version_source: URI of the model artifacts
            version_run_id: ID of the run that produced the artifacts

        Returns:
            The created model version (version "1").
        """
        try:
            self.model_registry_client.create_registered_model(name)
            return self.model_version_client.create_model_version(name, version_source, version_run_id)
        except Exception as e:
            log_workflow_error(e)
            raise

    def update_registered_model_description_and_tag(
        self,
        name: str,
        tag_key: str,
        tag_value: str,
        description: str,
    ) -> RegisteredModel:
        """Tag a registered model, then replace its description.

        Args:
            name: Name of the registered model
            tag_key: Key of the tag to set
            tag_value: Value of the tag
            description: New description

        Returns:
            The registered model after the description update.
        """
        try:
            self.model_registry_client.set_registered_model_tag(name, tag_key, tag_value)
            return self.model_registry_client.update_registered_model(name, description)
        except Exception as e:
            log_workflow_error(e)
            raise

    def update_all_latest_model_version(self, name: str, alias: str, description: str, key: str, value: str) -> ModelVersion:
        """Set alias, tag and description on the latest version of a model.

        The calls run in that order; a failure leaves earlier ones applied.

        Raises:
            ModelVersionNotFoundError: If the model has no versions.
        """
        try:
            version = self._latest_version(name, "update")
            return self._update_all(name, version, alias, description, key, value)
        except Exception as e:
            log_workflow_error(e)
            raise

    def set_latest_model_version_tag(self, name: str, key: str, value: str) -> None:
        """Set a tag on the latest version of a model.

        Raises:
            ModelVersionNotFoundError: If the model has no versions.
        """
        try:
            version = self._latest_version(name, "set tag for")
            self.model_version_client.set_model_version_tag(name, version, key, value)
        except Exception as e:
            log_workflow_error(e)
            raise

    def set_latest_model_version_alias(self, name: str, alias: str) -> None:
        """Point ``alias`` at the latest version of a model.

        Raises:
            ModelVersionNotFoundError: If the model has no versions.
        """
        try:
            version = self._latest_version(name, "set alias for")
            self.model_registry_client.set_registered_model_alias(name, alias, version)
        except Exception as e:
            log_workflow_error(e)
            raise

    def update_latest_model_version(self, name: str, description: str) -> ModelVersion:
        """Replace the description of the latest version of a model.

        Returns:
            The updated model version.

        Raises:
            ModelVersionNotFoundError: If the model has no versions.
        """
        try:
            version = self._latest_version(name, "set description for")
            return self.model_version_client.update_model_version(name, version, description)
        except Exception as e:
            log_workflow_error(e)
            raise

    def update_all_model_version(
        self,
        name: str,
        version: str,
        alias: str,
        description: str,
        key: str,
        value: str,
    ) -> ModelVersion:
        """Set alias, tag and description on a specific model version."""
        try:
            return self._update_all(name, version, alias, description, key, value)
        except Exception as e:
            log_workflow_error(e)
            raise

    def _update_all(self, name: str, version: str, alias: str, description: str, key: str, value: str) -> ModelVersion:
        self.model_registry_client.set_registered_model_alias(name, alias, version)
        self.model_version_client.set_model_version_tag(name, version, key, value)
        return self.model_version_client.update_model_version(name, version, description)

    def delete_latest_model_version(self, name: str) -> None:
        """Delete the latest version of a model.

        Raises:
            ModelVersionNotFoundError: If the model has no versions.
        """
        try:
            version = self._latest_version(name, "delete")
            self.model_version_client.delete_model_version(name, version)
        except Exception as e:
            log_workflow_error(e)
            raise
        logger.info(f"Deleted version {version} of model {name}")

    def create_model_from_run_with_best_metric(
        self,
        experiment_ids: Sequence[str],
        filter_metric: str,
        metric_min_or_max: str,
        model_name: str,
    ) -> ModelVersion:
        """Register a new model from the run with the best value of a metric.

        Args:
            experiment_ids: Experiments whose runs are compared
            filter_metric: Metric to compare
            metric_min_or_max: "min" or "max"
            model_name: Name of the registered model to create

        Returns:
            The created model version, sourced from the best run's artifact URI.

        Raises:
            ValueError: If metric_min_or_max is neither "min" nor "max"
            RunNotFoundError: If no run logged filter_metric
        """
        if metric_min_or_max not in ("min", "max"):
            raise ValueError(f"metric_min_or_max must be 'min' or 'max', got: {metric_min_or_max!r}")

        try:
            page = self.run_client.search_runs(experiment_ids, f"metrics.{filter_metric} != {_METRIC_PRESENT_SENTINEL}")
            best_run = _select_best_run(page.runs, filter_metric, metric_min_or_max)
            if best_run is None:
                raise RunNotFoundError(f"No run in experiments {list(experiment_ids)} logged metric {filter_metric!r}")

            logger.info(f"Best run for {metric_min_or_max} {filter_metric}: {best_run.info.run_id}")
            self.model_registry_client.create_registered_model(model_name)
            return self.model_version_client.create_model_version(model_name, best_run.info.artifact_uri or "", best_run.info.run_id)
        except Exception as e:
            log_workflow_error(e)
            raise


def _select_best_run(runs: Sequence[Run], metric_key: str, metric_min_or_max: str) -> Run | None:
    """Pick the run with the lowest or highest value of ``metric_key``; first wins on ties."""
    best_run: Run | None = None
    best_value = float("inf") if metric_min_or_max == "min" else float("-inf")
    for run in runs:
        for metric in run.data.metrics:
            if metric.key != metric_key:
                continue
            if (metric_min_or_max == "min" and metric.value < best_value) or (
                metric_min_or_max == "max" and metric.value > best_value
            ):
                best_value = metric.value
                best_run = run
    return best_run
