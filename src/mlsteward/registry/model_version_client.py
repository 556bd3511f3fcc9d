"""Client for the model-version endpoints of the model registry."""

from __future__ import annotations

from collections.abc import Sequence

from mlsteward.models import ModelVersion
from mlsteward.tracking._http import TrackingHttpClient


class ModelVersionClient:
    """Create, search, update, tag, transition and delete model versions."""

    def __init__(self, http: TrackingHttpClient) -> None:
        self.http = http

    def create_model_version(
        self,
        name: str,
        source: str,
        run_id: str | None = None,
        tags: Sequence[dict[str, str]] | None = None,
        run_link: str | None = None,
        description: str | None = None,
    ) -> ModelVersion:
        """Create a new version of a registered model.

        Args:
            name: Name of the registered model
            source: URI of the model artifacts
            run_id: ID of the run that produced ``source``, for correlation
            tags: Tags for the model version
            run_link: Link to the run that generated this version
            description: Description of the model version

        Returns:
            The created model version.
        """
        data = self.http.call(
            "POST",
            "model-versions/create",
            "Error creating model version",
            json={
                "name": name,
                "source": source,
                "run_id": run_id,
                "tags": list(tags) if tags is not None else None,
                "run_link": run_link,
                "description": description,
            },
        )
        return ModelVersion.model_validate(data["model_version"])

    def get_model_version(self, name: str, version: str) -> ModelVersion:
        """Get one version of a registered model.

        Raises:
            ApiError: If the model or the version does not exist.
        """
        data = self.http.call(
            "GET", "model-versions/get", "Error getting model version", params={"name": name, "version": version}
        )
        return ModelVersion.model_validate(data["model_version"])

    def update_model_version(self, name: str, version: str, description: str | None = None) -> ModelVersion:
        """Update the description of a model version.

        Args:
            name: Name of the registered model
            version: Version number, as a string
            description: New description

        Returns:
            The updated model version.
        """
        data = self.http.call(
            "PATCH",
            "model-versions/update",
            "Error updating model version",
            json={"name": name, "version": version, "description": description},
        )
        return ModelVersion.model_validate(data["model_version"])

    def delete_model_version(self, name: str, version: str) -> None:
        """Delete one version of a registered model."""
        self.http.call(
            "DELETE", "model-versions/delete", "Error deleting model version", json={"name": name, "version": version}
        )

    def search_model_versions(
        self,
        filter: str | None = None,
        max_results: int | None = None,
        order_by: Sequence[str] | None = None,
        page_token: str | None = None,
    ) -> list[ModelVersion]:
        """Search model versions, e.g. ``search_model_versions("run_id = 'abc'")``.

        Args:
            filter: Filter expression over ``name``, ``run_id`` or ``source_path``
            max_results: Maximum number of versions to return
            order_by: Columns to order by
            page_token: Token of the page to fetch

        Returns:
            Matching versions, or an empty list when nothing matches.
        """
        data = self.http.call(
            "GET",
            "model-versions/search",
            "Error searching model versions",
            params={
                "filter": filter,
                "max_results": max_results,
                "order_by": list(order_by) if order_by is not None else None,
                "page_token": page_token,
            },
        )
        return [ModelVersion.model_validate(item) for item in data.get("model_versions") or []]

    def get_download_uri_for_model_version_artifacts(self, name: str, version: str) -> str:
        """Return the URI from which the version's artifacts can be downloaded."""
        data = self.http.call(
            "GET",
            "model-versions/get-download-uri",
            "Error getting download uri for model version artifacts",
            params={"name": name, "version": version},
        )
        return data["artifact_uri"]

    def transition_model_version_stage(
        self,
        name: str,
        version: str,
        stage: str,
        archive_existing_versions: bool,
    ) -> ModelVersion:
        """Move a model version to another stage.

        Args:
            name: Name of the registered model
            version: Version number, as a string
            stage: Target stage, e.g. "Staging", "Production" or "Archived"
            archive_existing_versions: Archive the versions currently in ``stage``

        Returns:
            The model version in its new stage.
        """
        data = self.http.call(
            "POST",
            "model-versions/transition-stage",
            "Error transitioning model version stage",
            json={"name": name, "version": version, "stage": stage, "archive_existing_versions": archive_existing_versions},
        )
        return ModelVersion.model_validate(data["model_version"])

    def set_model_version_tag(self, name: str, version: str, key: str, value: str) -> None:
        """Set a tag on a model version, overwriting an existing value."""
        self.http.call(
            "POST",
            "model-versions/set-tag",
            "Error setting model version tag",
            json={"name": name, "version": version, "key": key, "value": value},
        )

    def delete_model_version_tag(self, name: str, version: str, key: str) -> None:
        self.http.call(
            "DELETE",
            "model-versions/delete-tag",
            "Error deleting model version tag",
            json={"name": name, "version": version, "key": key},
        )
