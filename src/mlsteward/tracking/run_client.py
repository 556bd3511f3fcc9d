"""Client for the run endpoints of the tracking server."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from mlsteward.models import DatasetInput, MetricHistoryPage, Run, RunInfo, RunStatus, SearchRunsPage, ViewType
from mlsteward.tracking._http import TrackingHttpClient
from mlsteward.utils.timestamp import now_ms, parse_to_ms


def _to_payload(items: Sequence[BaseModel | dict[str, Any]] | None) -> list[dict[str, Any]] | None:
    """Serialize models or plain dicts into request JSON."""
    if items is None:
        return None
    payload = []
    for item in items:
        if isinstance(item, DatasetInput):
            payload.append(item.to_request())
        elif isinstance(item, BaseModel):
            payload.append(item.model_dump(mode="json", exclude_none=True))
        else:
            payload.append(dict(item))
    return payload


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, (RunStatus, ViewType)) else value


class RunClient:
    """Create, read, update, delete and search runs, and log data to them.

    Every method issues exactly one HTTP request.
    """

    def __init__(self, http: TrackingHttpClient) -> None:
        self.http = http

    def create_run(
        self,
        experiment_id: str,
        run_name: str | None = None,
        start_time: int | datetime | None = None,
        tags: Sequence[BaseModel | dict[str, Any]] | None = None,
    ) -> Run:
        """Create a new run within an experiment.

        Args:
            experiment_id: ID of the associated experiment
            run_name: Name of the run
            start_time: Start time (UNIX ms or datetime). Defaults to now.
            tags: Additional metadata for the run

        Returns:
            The created run.
        """
        start_ms = now_ms() if start_time is None else parse_to_ms(start_time)
        data = self.http.call(
            "POST",
            "runs/create",
            "Error creating run",
            json={"experiment_id": experiment_id, "run_name": run_name, "start_time": start_ms, "tags": _to_payload(tags)},
        )
        return Run.model_validate(data["run"])

    def get_run(self, run_id: str) -> Run:
        """Get metadata, metrics, params, and tags for a run.

        Where a metric key was logged several times, the server returns the
        value with the latest timestamp (maximum value on ties).
        """
        data = self.http.call("GET", "runs/get", "Error fetching run", params={"run_id": run_id})
        return Run.model_validate(data["run"])

    def update_run(
        self,
        run_id: str,
        status: RunStatus | str | None = None,
        end_time: int | datetime | None = None,
        run_name: str | None = None,
    ) -> RunInfo:
        """Update run metadata and return the updated run info."""
        data = self.http.call(
            "POST",
            "runs/update",
            "Error updating run",
            json={
                "run_id": run_id,
                "status": _enum_value(status),
                "end_time": None if end_time is None else parse_to_ms(end_time),
                "run_name": run_name,
            },
        )
        return RunInfo.model_validate(data["run_info"])

    def delete_run(self, run_id: str) -> None:
        """Mark a run for deletion."""
        self.http.call("POST", "runs/delete", "Error deleting run", json={"run_id": run_id})

    def restore_run(self, run_id: str) -> None:
        """Restore a deleted run."""
        self.http.call("POST", "runs/restore", "Error restoring run", json={"run_id": run_id})

    def log_metric(
        self,
        run_id: str,
        key: str,
        value: float,
        timestamp: int | datetime | None = None,
        step: int | None = None,
    ) -> None:
        """Log a metric value. A metric key can be logged many times.

        Args:
            run_id: ID of the run under which to log the metric
            key: Name of the metric
            value: Value of the metric
            timestamp: Time the value was logged (UNIX ms or datetime). Defaults to now.
            step: Step at which to log the metric
        """
        self.http.call(
            "POST",
            "runs/log-metric",
            "Error logging metric",
            json={
                "run_id": run_id,
                "key": key,
                "value": value,
                "timestamp": now_ms() if timestamp is None else parse_to_ms(timestamp),
                "step": step,
            },
        )

    def log_batch(
        self,
        run_id: str,
        metrics: Sequence[BaseModel | dict[str, Any]] | None = None,
        params: Sequence[BaseModel | dict[str, Any]] | None = None,
        tags: Sequence[BaseModel | dict[str, Any]] | None = None,
    ) -> None:
        """Log metrics, params and tags in a single request.

        On a server-side failure partial data may already be written.
        """
        self.http.call(
            "POST",
            "runs/log-batch",
            "Error logging batch",
            json={"run_id": run_id, "metrics": _to_payload(metrics), "params": _to_payload(params), "tags": _to_payload(tags)},
        )

    def log_model(self, run_id: str, model_json: str) -> None:
        """Log an MLmodel description (JSON string) to the run."""
        self.http.call("POST", "runs/log-model", "Error logging model", json={"run_id": run_id, "model_json": model_json})

    def log_inputs(self, run_id: str, datasets: Sequence[DatasetInput | dict[str, Any]]) -> None:
        """Log dataset inputs to the run."""
        self.http.call("POST", "runs/log-inputs", "Error in logging inputs", json={"run_id": run_id, "datasets": _to_payload(datasets)})

    def set_tag(self, run_id: str, key: str, value: str) -> None:
        """Set a tag on a run. Tags can be updated during and after a run."""
        self.http.call("POST", "runs/set-tag", "Error setting tag", json={"run_id": run_id, "key": key, "value": value})

    def delete_tag(self, run_id: str, key: str) -> None:
        self.http.call("POST", "runs/delete-tag", "Error deleting tag", json={"run_id": run_id, "key": key})

    def log_param(self, run_id: str, key: str, value: str) -> None:
        """Log a param. A param key can be logged only once per run."""
        self.http.call("POST", "runs/log-parameter", "Error logging param", json={"run_id": run_id, "key": key, "value": value})

    def get_metric_history(
        self,
        run_id: str,
        metric_key: str,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> MetricHistoryPage:
        """Get all logged values of one metric for a run."""
        data = self.http.call(
            "GET",
            "metrics/get-history",
            "Error fetching metric history",
            params={"run_id": run_id, "metric_key": metric_key, "page_token": page_token, "max_results": max_results},
        )
        return MetricHistoryPage.model_validate(data)

    def search_runs(
        self,
        experiment_ids: Sequence[str],
        filter: str = "",
        run_view_type: ViewType | str | None = None,
        max_results: int | None = None,
        order_by: Sequence[str] | None = None,
        page_token: str | None = None,
    ) -> SearchRunsPage:
        """Search for runs that satisfy a filter expression.

        Args:
            experiment_ids: Experiment IDs to search over
            filter: Filter over params, metrics and tags, e.g. ``metrics.rmse < 1``
            run_view_type: Active, deleted, or all runs. Server default is active only.
            max_results: Maximum number of runs per page
            order_by: Columns to order by, e.g. ``["metrics.rmse DESC"]``
            page_token: Token of the page to fetch

        Returns:
            One page of runs and the token of the next page, if any.
        """
        data = self.http.call(
            "POST",
            "runs/search",
            "Error fetching runs that satisfies expressions",
            json={
                "experiment_ids": list(experiment_ids),
                "filter": filter,
                "run_view_type": _enum_value(run_view_type),
                "max_results": max_results,
                "order_by": list(order_by) if order_by is not None else None,
                "page_token": page_token,
            },
        )
        return SearchRunsPage.model_validate(data)

    def list_artifacts(self, run_id: str, path: str | None = None, page_token: str | None = None) -> dict[str, Any]:
        """List artifacts of a run, optionally below a relative path."""
        return self.http.call(
            "GET",
            "artifacts/list",
            "Error listing artifacts",
            params={"run_id": run_id, "path": path, "page_token": page_token},
        )
