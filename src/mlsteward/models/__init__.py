"""
mlsteward data models package.

This package contains the entities exchanged with the tracking server and
the value objects returned by the workflows.
"""

from mlsteward.models.experiment import Experiment, ExperimentTag, SearchExperimentsPage
from mlsteward.models.registry import (
    ModelVersion,
    RegisteredModel,
    RegisteredModelAlias,
    RegistryTag,
    SearchRegisteredModelsPage,
)
from mlsteward.models.results import CleanupResult, CopyResult, RunMetricSummary
from mlsteward.models.run import (
    Dataset,
    DatasetInput,
    InputTag,
    Metric,
    MetricHistoryPage,
    Param,
    Run,
    RunData,
    RunInfo,
    RunInputs,
    RunTag,
    SearchRunsPage,
)
from mlsteward.models.status import LifecycleStage, RunStatus, ViewType

__all__ = [
    "CleanupResult",
    "CopyResult",
    "Dataset",
    "DatasetInput",
    "Experiment",
    "ExperimentTag",
    "InputTag",
    "LifecycleStage",
    "Metric",
    "MetricHistoryPage",
    "ModelVersion",
    "Param",
    "RegisteredModel",
    "RegisteredModelAlias",
    "RegistryTag",
    "Run",
    "RunData",
    "RunInfo",
    "RunInputs",
    "RunMetricSummary",
    "RunStatus",
    "RunTag",
    "SearchExperimentsPage",
    "SearchRegisteredModelsPage",
    "SearchRunsPage",
    "ViewType",
]
