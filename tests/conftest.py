"""
Pytest configuration and shared fixtures.

Provides an in-memory stand-in for the tracking server that implements the
run, model-version and model-registry client surface used by the workflows.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from requests.adapters import HTTPAdapter

from mlsteward.config import reset_settings
from mlsteward.exceptions import ApiError
from mlsteward.models import (
    DatasetInput,
    LifecycleStage,
    Metric,
    ModelVersion,
    Param,
    RegisteredModel,
    RegistryTag,
    Run,
    RunData,
    RunInfo,
    RunInputs,
    RunStatus,
    RunTag,
    SearchRunsPage,
)
from mlsteward.tracking._http import TrackingHttpClient

_METRIC_CLAUSE = re.compile(r"^metrics\.(\w+)\s*(>=|<=|!=|=|>|<)\s*(-?[\d.]+)$")
_RUN_ID_CLAUSE = re.compile(r"^run_id\s*=\s*'([^']*)'$")
_OPERATORS = {
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    "=": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
}


@pytest.fixture(autouse=True)
def clean_env_for_tests(monkeypatch):
    """Clean environment variables and cached settings for test isolation.

    This fixture is applied automatically to all tests (autouse=True).
    """
    monkeypatch.delenv("MLFLOW_TRACKING_URI", raising=False)
    monkeypatch.delenv("MLSTEWARD_REQUEST_TIMEOUT", raising=False)
    monkeypatch.delenv("MLSTEWARD_SEARCH_PAGE_SIZE", raising=False)
    reset_settings()
    yield
    reset_settings()


class FakeTrackingServer:
    """In-memory tracking server exposing the client methods workflows call.

    Records every call in ``calls`` as ``(method_name, args_dict)``. Set
    ``fail_on`` to a method name (and optionally ``fail_after`` to a call
    count) to make that method raise ApiError.
    """

    def __init__(self) -> None:
        self.runs: dict[str, Run] = {}
        self.models: dict[str, RegisteredModel] = {}
        self.versions: dict[str, list[ModelVersion]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: str | None = None
        self.fail_after: int = 0
        self._clock = 1_700_000_000_000
        self._next_id = 0

    # ---- helpers -------------------------------------------------------

    def _record(self, name: str, /, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if name == self.fail_on:
            if self.fail_after <= 0:
                raise ApiError(f"Injected failure in {name}", 500, error_code="INTERNAL_ERROR")
            self.fail_after -= 1

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [kwargs for call, kwargs in self.calls if call == name]

    def _tick(self) -> int:
        self._clock += 1000
        return self._clock

    def add_run(
        self,
        experiment_id: str,
        metrics: dict[str, float] | None = None,
        params: dict[str, str] | None = None,
        tags: dict[str, str] | None = None,
        **info: Any,
    ) -> Run:
        """Seed a run directly, bypassing call recording."""
        self._next_id += 1
        run_id = info.pop("run_id", f"run{self._next_id:04d}")
        start_time = info.pop("start_time", self._tick())
        run = Run(
            info=RunInfo(
                run_id=run_id,
                experiment_id=experiment_id,
                start_time=start_time,
                artifact_uri=info.pop("artifact_uri", f"mlflow-artifacts:/{experiment_id}/{run_id}/artifacts"),
                **info,
            ),
            data=RunData(
                metrics=[Metric(key=k, value=v, timestamp=start_time, step=0) for k, v in (metrics or {}).items()],
                params=[Param(key=k, value=v) for k, v in (params or {}).items()],
                tags=[RunTag(key=k, value=v) for k, v in (tags or {}).items()],
            ),
        )
        self.runs[run_id] = run
        return run

    def active_runs(self, experiment_id: str) -> list[Run]:
        return [
            run
            for run in self.runs.values()
            if run.info.experiment_id == experiment_id and run.info.lifecycle_stage == LifecycleStage.ACTIVE
        ]

    def _get(self, run_id: str) -> Run:
        if run_id not in self.runs:
            raise ApiError(f"Run '{run_id}' not found", 404, error_code="RESOURCE_DOES_NOT_EXIST")
        return self.runs[run_id]

    @staticmethod
    def _matches(run: Run, filter_string: str) -> bool:
        if not filter_string:
            return True
        for clause in re.split(r"\s+and\s+", filter_string.strip(), flags=re.IGNORECASE):
            metric_match = _METRIC_CLAUSE.match(clause)
            run_id_match = _RUN_ID_CLAUSE.match(clause)
            if metric_match:
                key, op, raw = metric_match.groups()
                value = run.data.get_metric(key)
                if value is None or not _OPERATORS[op](value, float(raw)):
                    return False
            elif run_id_match:
                if run.info.run_id != run_id_match.group(1):
                    return False
            else:
                raise ApiError(f"Unsupported filter clause: {clause}", 400, error_code="INVALID_PARAMETER_VALUE")
        return True

    @staticmethod
    def _sort(runs: list[Run], order_by: Sequence[str] | None) -> list[Run]:
        # Default ordering and tie-break: start_time DESC, then run_id
        runs = sorted(runs, key=lambda r: r.info.run_id)
        runs = sorted(runs, key=lambda r: r.info.start_time or 0, reverse=True)
        for clause in reversed(list(order_by or [])):
            parts = clause.split()
            column = parts[0]
            descending = len(parts) > 1 and parts[1].upper() == "DESC"
            if column == "start_time":
                runs = sorted(runs, key=lambda r: r.info.start_time or 0, reverse=descending)
            elif column.startswith("metrics."):
                key = column[len("metrics.") :]
                present = [r for r in runs if r.data.get_metric(key) is not None]
                missing = [r for r in runs if r.data.get_metric(key) is None]
                present = sorted(present, key=lambda r: r.data.get_metric(key), reverse=descending)
                runs = present + missing
        return runs

    # ---- RunClient surface ---------------------------------------------

    def create_run(self, experiment_id, run_name=None, start_time=None, tags=None) -> Run:
        self._record("create_run", experiment_id=experiment_id, run_name=run_name, start_time=start_time, tags=tags)
        run = self.add_run(experiment_id, start_time=start_time if start_time is not None else self._tick())
        if run_name:
            run.info.run_name = run_name
        return run

    def get_run(self, run_id) -> Run:
        self._record("get_run", run_id=run_id)
        return self._get(run_id).model_copy(deep=True)

    def update_run(self, run_id, status=None, end_time=None, run_name=None) -> RunInfo:
        self._record("update_run", run_id=run_id, status=status, end_time=end_time, run_name=run_name)
        run = self._get(run_id)
        if status is not None:
            run.info.status = RunStatus(status)
        if end_time is not None:
            run.info.end_time = end_time
        if run_name is not None:
            run.info.run_name = run_name
        return run.info

    def delete_run(self, run_id) -> None:
        self._record("delete_run", run_id=run_id)
        self._get(run_id).info.lifecycle_stage = LifecycleStage.DELETED

    def restore_run(self, run_id) -> None:
        self._record("restore_run", run_id=run_id)
        self._get(run_id).info.lifecycle_stage = LifecycleStage.ACTIVE

    def log_param(self, run_id, key, value) -> None:
        self._record("log_param", run_id=run_id, key=key, value=value)
        run = self._get(run_id)
        if any(p.key == key for p in run.data.params):
            raise ApiError(f"Param {key} already logged", 400, error_code="INVALID_PARAMETER_VALUE")
        run.data.params.append(Param(key=key, value=value))

    def log_metric(self, run_id, key, value, timestamp=None, step=None) -> None:
        self._record("log_metric", run_id=run_id, key=key, value=value, timestamp=timestamp, step=step)
        run = self._get(run_id)
        run.data.metrics.append(Metric(key=key, value=value, timestamp=timestamp or self._tick(), step=step or 0))

    def log_batch(self, run_id, metrics=None, params=None, tags=None) -> None:
        self._record("log_batch", run_id=run_id, metrics=metrics, params=params, tags=tags)
        run = self._get(run_id)
        for metric in metrics or []:
            run.data.metrics.append(Metric.model_validate(metric))
        for param in params or []:
            run.data.params.append(Param.model_validate(param))
        for tag in tags or []:
            run.data.tags.append(RunTag.model_validate(tag))

    def log_model(self, run_id, model_json) -> None:
        self._record("log_model", run_id=run_id, model_json=model_json)

    def set_tag(self, run_id, key, value) -> None:
        self._record("set_tag", run_id=run_id, key=key, value=value)
        run = self._get(run_id)
        run.data.tags = [t for t in run.data.tags if t.key != key] + [RunTag(key=key, value=value)]

    def log_inputs(self, run_id, datasets) -> None:
        self._record("log_inputs", run_id=run_id, datasets=datasets)
        run = self._get(run_id)
        for dataset in datasets:
            run.inputs.dataset_inputs.append(DatasetInput.model_validate(dataset))

    def search_runs(
        self, experiment_ids, filter="", run_view_type=None, max_results=None, order_by=None, page_token=None
    ) -> SearchRunsPage:
        self._record(
            "search_runs",
            experiment_ids=list(experiment_ids),
            filter=filter,
            max_results=max_results,
            order_by=order_by,
            page_token=page_token,
        )
        candidates = [
            run
            for run in self.runs.values()
            if run.info.experiment_id in experiment_ids
            and run.info.lifecycle_stage == LifecycleStage.ACTIVE
            and self._matches(run, filter)
        ]
        ordered = self._sort(candidates, order_by)
        size = max_results or 1000
        offset = int(page_token) if page_token else 0
        page = ordered[offset : offset + size]
        next_token = str(offset + size) if offset + size < len(ordered) else None
        return SearchRunsPage(runs=[run.model_copy(deep=True) for run in page], next_page_token=next_token)

    # ---- Registry surface ----------------------------------------------

    def add_model_version(self, name: str, run_id: str, source: str, current_stage: str = "None") -> ModelVersion:
        """Seed a model version directly, bypassing call recording."""
        self.models.setdefault(name, RegisteredModel(name=name))
        versions = self.versions.setdefault(name, [])
        version = ModelVersion(
            name=name, version=str(len(versions) + 1), run_id=run_id, source=source, current_stage=current_stage
        )
        versions.append(version)
        return version

    def search_model_versions(self, filter=None, max_results=None, order_by=None, page_token=None) -> list[ModelVersion]:
        self._record("search_model_versions", filter=filter)
        match = _RUN_ID_CLAUSE.match(filter or "")
        found = [v for versions in self.versions.values() for v in versions]
        if match:
            found = [v for v in found if v.run_id == match.group(1)]
        return found

    def create_registered_model(self, name, tags=None, description=None) -> RegisteredModel:
        self._record("create_registered_model", name=name)
        if name in self.models:
            raise ApiError(f"Registered Model (name={name}) already exists.", 400, error_code="RESOURCE_ALREADY_EXISTS")
        self.models[name] = RegisteredModel(name=name, description=description)
        self.versions[name] = []
        return self.models[name]

    def update_registered_model(self, name, description=None) -> RegisteredModel:
        self._record("update_registered_model", name=name, description=description)
        self.models[name].description = description
        return self.models[name]

    def set_registered_model_tag(self, name, key, value) -> None:
        self._record("set_registered_model_tag", name=name, key=key, value=value)
        self.models[name].tags.append(RegistryTag(key=key, value=value))

    def get_latest_model_versions(self, name, stages=None) -> list[ModelVersion]:
        self._record("get_latest_model_versions", name=name)
        versions = self.versions.get(name, [])
        return [versions[-1]] if versions else []

    def set_registered_model_alias(self, name, alias, version) -> None:
        self._record("set_registered_model_alias", name=name, alias=alias, version=version)
        self._version(name, version).aliases.append(alias)

    def create_model_version(self, name, source, run_id=None, tags=None, run_link=None, description=None) -> ModelVersion:
        self._record("create_model_version", name=name, source=source, run_id=run_id)
        if name not in self.models:
            raise ApiError(f"Registered Model with name={name} not found", 404, error_code="RESOURCE_DOES_NOT_EXIST")
        return self.add_model_version(name, run_id, source)

    def set_model_version_tag(self, name, version, key, value) -> None:
        self._record("set_model_version_tag", name=name, version=version, key=key, value=value)
        self._version(name, version).tags.append(RegistryTag(key=key, value=value))

    def update_model_version(self, name, version, description=None) -> ModelVersion:
        self._record("update_model_version", name=name, version=version, description=description)
        model_version = self._version(name, version)
        model_version.description = description
        return model_version

    def delete_model_version(self, name, version) -> None:
        self._record("delete_model_version", name=name, version=version)
        self.versions[name].remove(self._version(name, version))

    def _version(self, name: str, version: str) -> ModelVersion:
        for model_version in self.versions.get(name, []):
            if model_version.version == version:
                return model_version
        raise ApiError(f"Model Version (name={name}, version={version}) not found", 404, error_code="RESOURCE_DOES_NOT_EXIST")


@pytest.fixture
def fake_server() -> FakeTrackingServer:
    return FakeTrackingServer()


def _make_response(status_code: int = 200, body: dict[str, Any] | None = None, reason: str = "OK") -> MagicMock:
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.content = b"{}" if body is None else b"x"
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def make_response():
    """Factory for mock requests.Response objects."""
    return _make_response


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests.Session returning an empty 200 response."""
    session = MagicMock()
    session.headers = {}
    session.request.return_value = _make_response()
    return session


@pytest.fixture
def http(mock_session) -> TrackingHttpClient:
    return TrackingHttpClient("http://tracking.test:5000", timeout=30.0, session=mock_session)


class RecordingAdapter(HTTPAdapter):
    """Transport adapter that answers locally and keeps every prepared request.

    ``routes`` maps an endpoint suffix (e.g. "runs/get") to the JSON body to
    return; unrouted endpoints answer with an empty object.
    """

    def __init__(self, routes: dict[str, dict[str, Any]] | None = None) -> None:
        super().__init__()
        self.routes = routes or {}
        self.requests: list[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        endpoint = request.path_url.split("?")[0].split("/api/2.0/mlflow/")[-1]

        response = requests.Response()
        response.status_code = 200
        response.reason = "OK"
        response.url = request.url
        response.request = request
        response.headers["Content-Type"] = "application/json"
        response._content = json.dumps(self.routes.get(endpoint, {})).encode()
        return response

    def bodies(self, endpoint: str) -> list[dict[str, Any]]:
        """Decoded JSON bodies sent to ``endpoint``, in order."""
        return [json.loads(r.body) for r in self.requests if r.path_url.split("?")[0].endswith(f"/api/2.0/mlflow/{endpoint}")]


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def live_http(recording_adapter) -> TrackingHttpClient:
    """Transport over a real requests.Session, so bodies go through requests' own JSON encoding."""
    session = requests.Session()
    session.mount("http://", recording_adapter)
    client = TrackingHttpClient("http://tracking.test:5000", timeout=5.0, session=session)
    yield client
    client.close()
