"""Experiment-level workflows: end-to-end runs and metric summaries."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Literal

from mlsteward.logger import log_workflow_error, logger
from mlsteward.models import RunInfo, RunMetricSummary, RunStatus
from mlsteward.tracking.experiment_client import ExperimentClient
from mlsteward.tracking.run_client import RunClient

SortOrder = Literal["ASC", "DESC", 1, -1]


def resolve_sort_direction(order: Any) -> str | None:
    """Translate a summary sort order into an ``order_by`` direction.

    ``1`` or ``"DESC"`` gives ``"DESC"``, ``-1`` or ``"ASC"`` gives ``"ASC"``;
    anything else gives None (no explicit direction).
    """
    # bool compares equal to 1/-1, so exclude it explicitly
    if isinstance(order, bool):
        return None
    if order == 1 or order == "DESC":
        return "DESC"
    if order == -1 or order == "ASC":
        return "ASC"
    return None


class ExperimentManager:
    """Workflows spanning experiments and their runs."""

    def __init__(self, experiment_client: ExperimentClient, run_client: RunClient) -> None:
        self.experiment_client = experiment_client
        self.run_client = run_client

    def run_existing_experiment(
        self,
        experiment_id: str,
        run_name: str | None = None,
        metrics: Sequence[Any] | None = None,
        params: Sequence[Any] | None = None,
        tags: Sequence[Any] | None = None,
        model: dict[str, Any] | None = None,
    ) -> RunInfo:
        """Create a run under an existing experiment, log to it and finish it.

        Metrics, params and tags are sent in one ``log-batch`` call. The model,
        if given, is logged as JSON with the new ``run_id`` added to it.

        Returns:
            The run info after the run was marked FINISHED.
        """
        try:
            return self._run_and_finish(experiment_id, run_name, metrics, params, tags, model)
        except Exception as e:
            log_workflow_error(e)
            raise

    def run_new_experiment(
        self,
        experiment_name: str,
        run_name: str | None = None,
        metrics: Sequence[Any] | None = None,
        params: Sequence[Any] | None = None,
        tags: Sequence[Any] | None = None,
        model: dict[str, Any] | None = None,
    ) -> RunInfo:
        """Create an experiment, then run it the way run_existing_experiment does."""
        try:
            experiment_id = self.experiment_client.create_experiment(experiment_name)
            logger.info(f"Created experiment {experiment_name!r} with ID {experiment_id}")
            return self._run_and_finish(experiment_id, run_name, metrics, params, tags, model)
        except Exception as e:
            log_workflow_error(e)
            raise

    def _run_and_finish(
        self,
        experiment_id: str,
        run_name: str | None,
        metrics: Sequence[Any] | None,
        params: Sequence[Any] | None,
        tags: Sequence[Any] | None,
        model: dict[str, Any] | None,
    ) -> RunInfo:
        run = self.run_client.create_run(experiment_id, run_name)
        run_id = run.info.run_id

        self.run_client.log_batch(run_id, metrics, params, tags)

        if model is not None:
            # Caller's dict is left untouched
            model_json = json.dumps({**model, "run_id": run_id})
            self.run_client.log_model(run_id, model_json)

        return self.run_client.update_run(run_id, status=RunStatus.FINISHED)

    def experiment_summary(
        self,
        experiment_id: str,
        primary_metric: str,
        order: SortOrder | None = None,
    ) -> list[RunMetricSummary]:
        """Return every run of the experiment, sorted by ``primary_metric``.

        Args:
            experiment_id: The experiment whose runs are summarized
            primary_metric: Metric the runs are ordered by and projected onto
            order: ``"DESC"``/``1`` for descending, ``"ASC"``/``-1`` for ascending

        Returns:
            One entry per run in server order. ``metric_value`` is None for
            runs that did not log the metric.
        """
        direction = resolve_sort_direction(order)
        order_clause = f"metrics.{primary_metric}"
        if direction is not None:
            order_clause = f"{order_clause} {direction}"

        summaries: list[RunMetricSummary] = []
        page_token: str | None = None
        try:
            while True:
                page = self.run_client.search_runs([experiment_id], "", order_by=[order_clause], page_token=page_token)
                summaries.extend(RunMetricSummary(run=run, metric_value=run.data.get_metric(primary_metric)) for run in page.runs)
                page_token = page.next_page_token
                if not page_token:
                    break
        except Exception as e:
            log_workflow_error(e)
            raise

        return summaries
