"""Client for the registered-model endpoints of the model registry."""

from __future__ import annotations

from collections.abc import Sequence

from mlsteward.models import ModelVersion, RegisteredModel, SearchRegisteredModelsPage
from mlsteward.tracking._http import TrackingHttpClient


class ModelRegistryClient:
    """Manage registered models, their tags and their aliases.

    Every method issues exactly one HTTP request and raises ApiError on a
    non-2xx response.
    """

    def __init__(self, http: TrackingHttpClient) -> None:
        self.http = http

    def create_registered_model(
        self,
        name: str,
        tags: Sequence[dict[str, str]] | None = None,
        description: str | None = None,
    ) -> RegisteredModel:
        """Create a registered model.

        Args:
            name: Unique name of the model
            tags: Tags as ``{"key": ..., "value": ...}`` dicts
            description: Optional description

        Returns:
            The created registered model.

        Raises:
            ApiError: If a model with this name already exists (RESOURCE_ALREADY_EXISTS).
        """
        data = self.http.call(
            "POST",
            "registered-models/create",
            "Error creating registered model",
            json={"name": name, "tags": list(tags) if tags is not None else None, "description": description},
        )
        return RegisteredModel.model_validate(data["registered_model"])

    def get_registered_model(self, name: str) -> RegisteredModel:
        """Get a registered model with its latest versions, tags and aliases.

        Raises:
            ApiError: If no model has this name.
        """
        data = self.http.call("GET", "registered-models/get", "Error getting registered model", params={"name": name})
        return RegisteredModel.model_validate(data["registered_model"])

    def rename_registered_model(self, name: str, new_name: str) -> RegisteredModel:
        """Rename a registered model and return it under its new name."""
        data = self.http.call(
            "POST", "registered-models/rename", "Error renaming registered model", json={"name": name, "new_name": new_name}
        )
        return RegisteredModel.model_validate(data["registered_model"])

    def update_registered_model(self, name: str, description: str | None = None) -> RegisteredModel:
        """Update the description of a registered model.

        Args:
            name: Name of the registered model
            description: New description

        Returns:
            The updated registered model.
        """
        data = self.http.call(
            "PATCH",
            "registered-models/update",
            "Error updating registered model",
            json={"name": name, "description": description},
        )
        return RegisteredModel.model_validate(data["registered_model"])

    def delete_registered_model(self, name: str) -> None:
        """Delete a registered model together with all of its versions."""
        self.http.call("DELETE", "registered-models/delete", "Error deleting registered model", json={"name": name})

    def get_latest_model_versions(self, name: str, stages: Sequence[str] | None = None) -> list[ModelVersion]:
        """Get the latest version of the model for each requested stage.

        Args:
            name: Name of the registered model
            stages: Stages to report on; all stages when omitted

        Returns:
            One version per stage, or an empty list when the model has no versions.
        """
        data = self.http.call(
            "POST",
            "registered-models/get-latest-versions",
            "Error getting latest versions",
            json={"name": name, "stages": list(stages) if stages is not None else None},
        )
        return [ModelVersion.model_validate(item) for item in data.get("model_versions") or []]

    def search_registered_models(
        self,
        filter: str | None = None,
        max_results: int | None = None,
        order_by: Sequence[str] | None = None,
        page_token: str | None = None,
    ) -> SearchRegisteredModelsPage:
        """Search registered models.

        Args:
            filter: Filter expression, e.g. ``name LIKE 'churn%'``
            max_results: Maximum number of models per page
            order_by: Columns to order by, e.g. ``["name ASC"]``
            page_token: Token of the page to fetch

        Returns:
            One page of models and the token of the next page, if any.
        """
        data = self.http.call(
            "GET",
            "registered-models/search",
            "Error searching registered models",
            params={
                "filter": filter,
                "max_results": max_results,
                "order_by": list(order_by) if order_by is not None else None,
                "page_token": page_token,
            },
        )
        return SearchRegisteredModelsPage.model_validate(data)

    def set_registered_model_tag(self, name: str, key: str, value: str) -> None:
        """Set a tag on a registered model, overwriting an existing value."""
        self.http.call(
            "POST",
            "registered-models/set-tag",
            "Error setting registered model tag",
            json={"name": name, "key": key, "value": value},
        )

    def delete_registered_model_tag(self, name: str, key: str) -> None:
        self.http.call(
            "DELETE", "registered-models/delete-tag", "Error deleting registered model tag", json={"name": name, "key": key}
        )

    def set_registered_model_alias(self, name: str, alias: str, version: str) -> None:
        """Point ``alias`` at ``version`` of the registered model.

        An alias names one version at a time; setting it again moves it.
        """
        self.http.call(
            "POST",
            "registered-models/alias",
            "Error setting registered model alias",
            json={"name": name, "alias": alias, "version": version},
        )

    def delete_registered_model_alias(self, name: str, alias: str) -> None:
        self.http.call(
            "DELETE", "registered-models/alias", "Error deleting registered model alias", json={"name": name, "alias": alias}
        )

    def get_model_version_by_alias(self, name: str, alias: str) -> ModelVersion:
        """Get the model version an alias currently points to.

        Raises:
            ApiError: If the alias is not set on the model.
        """
        data = self.http.call(
            "GET", "registered-models/alias", "Error getting model version by alias", params={"name": name, "alias": alias}
        )
        return ModelVersion.model_validate(data["model_version"])
