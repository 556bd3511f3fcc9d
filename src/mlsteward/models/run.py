"""
Run entities as returned by the tracking server.

The server omits empty repeated fields from its JSON, so every list
defaults to empty.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from mlsteward.models.status import LifecycleStage, RunStatus


class Metric(BaseModel):
    """A single logged metric value."""

    key: str
    value: float
    timestamp: int = Field(..., description="UNIX milliseconds at which the value was logged")
    step: int = Field(default=0, description="Training step the value belongs to")


class Param(BaseModel):
    """A write-once key/value parameter."""

    key: str
    value: str


class RunTag(BaseModel):
    """A mutable key/value tag."""

    key: str
    value: str


class RunInfo(BaseModel):
    """Run metadata."""

    run_id: str
    run_name: str | None = None
    experiment_id: str
    user_id: str | None = None
    status: RunStatus = RunStatus.RUNNING
    start_time: int | None = None
    end_time: int | None = None
    artifact_uri: str | None = None
    lifecycle_stage: LifecycleStage = LifecycleStage.ACTIVE


class RunData(BaseModel):
    """Metrics, params and tags of a run."""

    metrics: list[Metric] = Field(default_factory=list)
    params: list[Param] = Field(default_factory=list)
    tags: list[RunTag] = Field(default_factory=list)

    def get_metric(self, key: str) -> float | None:
        """Return the value of metric ``key``, or None if the run never logged it.

        Entries are not de-duplicated; when a key appears more than once the
        last entry wins.
        """
        value = None
        for metric in self.metrics:
            if metric.key == key:
                value = metric.value
        return value

    def has_metric(self, key: str) -> bool:
        return any(metric.key == key for metric in self.metrics)

    def get_tag(self, key: str) -> str | None:
        for tag in self.tags:
            if tag.key == key:
                return tag.value
        return None


class InputTag(BaseModel):
    key: str
    value: str


class Dataset(BaseModel):
    """Dataset descriptor attached to a run input."""

    name: str
    digest: str
    source_type: str
    source: str
    schema_: str | None = Field(default=None, alias="schema")
    profile: str | None = None

    model_config = {"populate_by_name": True}


class DatasetInput(BaseModel):
    """A dataset consumed by a run, with its input tags."""

    tags: list[InputTag] = Field(default_factory=list)
    dataset: Dataset

    def to_request(self) -> dict:
        """Serialize to the JSON shape expected by ``runs/log-inputs``."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RunInputs(BaseModel):
    dataset_inputs: list[DatasetInput] = Field(default_factory=list)


class Run(BaseModel):
    """A tracked execution: metadata, logged data and dataset inputs."""

    info: RunInfo
    data: RunData = Field(default_factory=RunData)
    inputs: RunInputs = Field(default_factory=RunInputs)

    @property
    def run_id(self) -> str:
        return self.info.run_id

    def __str__(self) -> str:
        return f"Run(run_id={self.info.run_id}, experiment_id={self.info.experiment_id}, status={self.info.status.value})"


class SearchRunsPage(BaseModel):
    """One page of ``runs/search`` results."""

    runs: list[Run] = Field(default_factory=list)
    next_page_token: str | None = None


class MetricHistoryPage(BaseModel):
    """One page of ``metrics/get-history`` results."""

    metrics: list[Metric] = Field(default_factory=list)
    next_page_token: str | None = None
