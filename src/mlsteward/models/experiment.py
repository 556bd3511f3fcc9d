"""Experiment entities."""

from pydantic import BaseModel, Field

from mlsteward.models.status import LifecycleStage


class ExperimentTag(BaseModel):
    key: str
    value: str


class Experiment(BaseModel):
    """A named container grouping runs."""

    experiment_id: str
    name: str
    artifact_location: str | None = None
    lifecycle_stage: LifecycleStage = LifecycleStage.ACTIVE
    creation_time: int | None = None
    last_update_time: int | None = None
    tags: list[ExperimentTag] = Field(default_factory=list)


class SearchExperimentsPage(BaseModel):
    """One page of ``experiments/search`` results."""

    experiments: list[Experiment] = Field(default_factory=list)
    next_page_token: str | None = None
