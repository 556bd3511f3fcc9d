"""Client for the experiment endpoints of the tracking server."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mlsteward.logger import logger
from mlsteward.models import Experiment, SearchExperimentsPage, ViewType
from mlsteward.tracking._http import TrackingHttpClient


class ExperimentClient:
    """Create, read, rename, tag, delete and restore experiments."""

    def __init__(self, http: TrackingHttpClient) -> None:
        self.http = http

    def create_experiment(
        self,
        name: str,
        artifact_location: str | None = None,
        tags: Sequence[dict[str, str]] | None = None,
    ) -> str:
        """Create an experiment and return its ID.

        Fails if an active experiment with the same name already exists.
        """
        data = self.http.call(
            "POST",
            "experiments/create",
            "Error creating experiment from tracking server",
            json={"name": name, "artifact_location": artifact_location, "tags": list(tags) if tags is not None else None},
        )
        return data["experiment_id"]

    def search_experiments(
        self,
        filter: str | None = None,
        max_results: int | None = None,
        page_token: str | None = None,
        order_by: Sequence[str] | None = None,
        view_type: ViewType | str | None = None,
    ) -> SearchExperimentsPage:
        data = self.http.call(
            "POST",
            "experiments/search",
            "Error searching for experiment from tracking server",
            json={
                "filter": filter,
                "max_results": max_results,
                "page_token": page_token,
                "order_by": list(order_by) if order_by is not None else None,
                "view_type": view_type.value if isinstance(view_type, ViewType) else view_type,
            },
        )
        return SearchExperimentsPage.model_validate(data)

    def get_experiment(self, experiment_id: str) -> Experiment:
        """Get an experiment by ID. Works on deleted experiments too."""
        data = self.http.call(
            "GET", "experiments/get", "Error getting experiment from tracking server", params={"experiment_id": experiment_id}
        )
        return Experiment.model_validate(data["experiment"])

    def get_experiment_by_name(self, experiment_name: str) -> Experiment:
        """Get an experiment by name, preferring the active one over deleted ones."""
        data = self.http.call(
            "GET",
            "experiments/get-by-name",
            "Error getting experiment by name from tracking server",
            params={"experiment_name": experiment_name},
        )
        return Experiment.model_validate(data["experiment"])

    def delete_experiment(self, experiment_id: str) -> None:
        self.http.call(
            "POST", "experiments/delete", "Error deleting experiment from tracking server", json={"experiment_id": experiment_id}
        )
        logger.info(f"Experiment ID {experiment_id} successfully deleted")

    def restore_experiment(self, experiment_id: str) -> None:
        self.http.call(
            "POST", "experiments/restore", "Error restoring experiment from tracking server", json={"experiment_id": experiment_id}
        )
        logger.info(f"Experiment ID {experiment_id} successfully restored")

    def update_experiment(self, experiment_id: str, new_name: str) -> None:
        """Rename an experiment. The new name must be unique."""
        self.http.call(
            "POST",
            "experiments/update",
            "Error updating experiment from tracking server",
            json={"experiment_id": experiment_id, "new_name": new_name},
        )
        logger.info(f"Experiment ID {experiment_id} successfully updated - new name is {new_name}")

    def set_experiment_tag(self, experiment_id: str, key: str, value: str) -> None:
        payload: dict[str, Any] = {"experiment_id": experiment_id, "key": key, "value": value}
        self.http.call("POST", "experiments/set-experiment-tag", "Error setting tag from tracking server", json=payload)
