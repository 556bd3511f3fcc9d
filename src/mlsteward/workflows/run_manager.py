"""Run housekeeping workflows: cleanup of runs and copying runs across experiments."""

from __future__ import annotations

import json
from collections.abc import Sequence

from mlsteward.config import get_settings
from mlsteward.logger import log_workflow_error, logger
from mlsteward.models import CleanupResult, CopyResult, LifecycleStage, Run
from mlsteward.registry.model_version_client import ModelVersionClient
from mlsteward.tracking.run_client import RunClient

# Ordering used for both cleanup queries
CLEANUP_ORDER_BY = ["start_time DESC"]

LIFECYCLE_STAGE_TAG = "mlflow.lifecycleStage"
RUN_NAME_TAG = "mlflow.runName"
NOTE_CONTENT_TAG = "mlflow.note.content"
NOTE_MODELS_TAG = "mlflow.note.models"
NOTE_ARTIFACTS_TAG = "mlflow.note.artifacts"
SOURCE_RUN_ID_TAG = "mlflow.source.run_id"
SOURCE_EXPERIMENT_ID_TAG = "mlflow.source.experiment_id"
MODEL_REFERENCE_TAG_PREFIX = "original_model_"

MODELS_NOT_COPIED_NOTE = "Models not copied, see original run."
ARTIFACTS_NOT_COPIED_NOTE = "Artifacts not copied - reference original run"


class RunManager:
    """Workflows that reconcile and migrate runs.

    Every workflow issues its client calls one at a time, in order. A failing
    call aborts the workflow; nothing already written is rolled back.
    """

    def __init__(
        self,
        run_client: RunClient,
        model_version_client: ModelVersionClient,
        page_size: int | None = None,
    ) -> None:
        self.run_client = run_client
        self.model_version_client = model_version_client
        self.page_size = page_size or get_settings().search_page_size

    def cleanup_runs(
        self,
        experiment_ids: Sequence[str],
        keep_filter: str,
        metric_key: str,
        dry_run: bool = True,
    ) -> CleanupResult:
        """Delete runs that do not meet the keep criteria.

        Runs that never logged ``metric_key`` are always kept. Dry run is the
        default; pass ``dry_run=False`` to actually delete.

        Both the unfiltered search and the keep-filter search are driven by
        the page token of the unfiltered search, so keep membership is only
        known for keep pages fetched so far.

        Args:
            experiment_ids: IDs of the experiments whose runs are reconciled
            keep_filter: Filter expression selecting runs to keep, e.g. ``metrics.acc > 0.9``
            metric_key: Metric key a run must have to be a deletion candidate
            dry_run: If True, only report what would be deleted

        Returns:
            The deleted (or would-be deleted) runs.
        """
        deleted_runs: list[Run] = []
        keep_run_ids: set[str] = set()
        page_token: str | None = None

        try:
            while True:
                all_page = self.run_client.search_runs(
                    experiment_ids,
                    "",
                    max_results=self.page_size,
                    order_by=CLEANUP_ORDER_BY,
                    page_token=page_token,
                )
                keep_page = self.run_client.search_runs(
                    experiment_ids,
                    keep_filter,
                    max_results=self.page_size,
                    order_by=CLEANUP_ORDER_BY,
                    page_token=page_token,
                )
                keep_run_ids.update(run.info.run_id for run in keep_page.runs)

                for run in all_page.runs:
                    run_id = run.info.run_id
                    if not run.data.has_metric(metric_key) or run_id in keep_run_ids:
                        keep_run_ids.add(run_id)
                        continue

                    deleted_runs.append(run)
                    if dry_run:
                        logger.debug(f"Dry run: would delete run {run_id}")
                    else:
                        self.run_client.delete_run(run_id)
                        logger.debug(f"Deleted run {run_id}")

                page_token = all_page.next_page_token
                if not page_token:
                    break
        except Exception as e:
            log_workflow_error(e)
            raise

        action = "would delete" if dry_run else "deleted"
        logger.info(f"Cleanup of experiments {list(experiment_ids)} {action} {len(deleted_runs)} run(s)")
        return CleanupResult(deleted_runs=deleted_runs, total=len(deleted_runs), dry_run=dry_run)

    def copy_run(self, run_id: str, target_experiment_id: str, run_name: str | None = None) -> CopyResult:
        """Copy a run into another experiment without its artifacts and models.

        The new run receives the original's status, end time, params, metrics,
        tags and dataset inputs. Registered model versions produced by the
        original run are referenced through tags, never duplicated.

        If a step fails the partially populated new run is left in place.

        Args:
            run_id: ID of the run to copy
            target_experiment_id: ID of the experiment receiving the copy
            run_name: Optional name for the new run (set as the ``mlflow.runName`` tag)

        Returns:
            IDs of the original run, the new run and the target experiment.
        """
        try:
            original = self.run_client.get_run(run_id)
            info = original.info

            new_run = self.run_client.create_run(target_experiment_id, start_time=info.start_time)
            new_run_id = new_run.info.run_id

            self.run_client.update_run(new_run_id, status=info.status, end_time=info.end_time or None)

            if info.lifecycle_stage != LifecycleStage.ACTIVE:
                self.run_client.set_tag(new_run_id, LIFECYCLE_STAGE_TAG, info.lifecycle_stage.value)

            for param in original.data.params:
                self.run_client.log_param(new_run_id, param.key, param.value)

            for metric in original.data.metrics:
                self.run_client.log_metric(new_run_id, metric.key, metric.value, timestamp=metric.timestamp, step=metric.step)

            for tag in original.data.tags:
                self.run_client.set_tag(new_run_id, tag.key, tag.value)

            for dataset_input in original.inputs.dataset_inputs:
                self.run_client.log_inputs(new_run_id, [dataset_input])

            if run_name:
                self.run_client.set_tag(new_run_id, RUN_NAME_TAG, run_name)

            model_versions = self.model_version_client.search_model_versions(f"run_id = '{run_id}'")
            for model_version in model_versions:
                self.run_client.set_tag(
                    new_run_id,
                    f"{MODEL_REFERENCE_TAG_PREFIX}{model_version.name}",
                    json.dumps(model_version.reference()),
                )
            if model_versions:
                self.run_client.set_tag(new_run_id, NOTE_MODELS_TAG, MODELS_NOT_COPIED_NOTE)

            description = (
                f"This run was copied from experiment {info.experiment_id}, original run ID: {run_id}. "
                f"Original artifact URI: {info.artifact_uri}."
            )
            self.run_client.set_tag(new_run_id, NOTE_CONTENT_TAG, description)
            self.run_client.set_tag(new_run_id, SOURCE_RUN_ID_TAG, run_id)
            self.run_client.set_tag(new_run_id, SOURCE_EXPERIMENT_ID_TAG, info.experiment_id)
            self.run_client.set_tag(new_run_id, NOTE_ARTIFACTS_TAG, ARTIFACTS_NOT_COPIED_NOTE)
        except Exception as e:
            log_workflow_error(e)
            raise

        logger.info(f"Copied run {run_id} to experiment {target_experiment_id} as run {new_run_id}")
        return CopyResult(original_run_id=run_id, new_run_id=new_run_id, target_experiment_id=target_experiment_id)
