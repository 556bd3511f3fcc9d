"""
Workflow result value objects.

These are constructed fresh per workflow invocation and never persisted.
"""

from pydantic import BaseModel, Field

from mlsteward.models.run import Run


class CleanupResult(BaseModel):
    """Outcome of a run cleanup."""

    deleted_runs: list[Run] = Field(default_factory=list, description="Runs deleted, or that would be deleted in a dry run")
    total: int = Field(..., description="Number of entries in deleted_runs")
    dry_run: bool = Field(..., description="Whether deletion was only simulated")

    @property
    def deleted_run_ids(self) -> list[str]:
        return [run.info.run_id for run in self.deleted_runs]


class CopyResult(BaseModel):
    """Outcome of copying one run into another experiment."""

    original_run_id: str
    new_run_id: str
    target_experiment_id: str


class RunMetricSummary(BaseModel):
    """A run paired with the value of the metric it was summarized by.

    ``metric_value`` is None exactly when the run never logged the metric.
    """

    run: Run
    metric_value: float | None = None

    @property
    def has_metric(self) -> bool:
        return self.metric_value is not None
