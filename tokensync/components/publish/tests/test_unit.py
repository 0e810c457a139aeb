"""
Publish component unit tests.

Tests for the fetch / transform / push / persist workflow and its failure
handling, using in-memory adapters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tokensync.components.publish import PublishInput, run_publish
from tokensync.core.ports.observer import CollectingObserver
from tokensync.core.ports.remote import ChangeRecordError, MappingStoreError, VariablesApiError
from tokensync.domain.variables import PushResponse, RemoteVariablesState, VariablesPayload

# --- Mock Adapters ---


class FakeVariablesApi:
    """In-memory remote file that assigns ids the way the vendor does."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.variables: dict[str, dict[str, Any]] = {}
        self.pushes: list[VariablesPayload] = []
        self.fail_fetch = False
        self.fail_push = False
        self._counter = 0

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    async def fetch_local_variables(self, file_key: str) -> RemoteVariablesState:
        if self.fail_fetch:
            raise VariablesApiError("upstream unavailable", status_code=503)
        return RemoteVariablesState.model_validate(
            {
                "variableCollections": list(self.collections.values()),
                "variables": list(self.variables.values()),
            }
        )

    async def push_variables(self, file_key: str, payload: VariablesPayload) -> PushResponse:
        if self.fail_push:
            raise VariablesApiError("invalid payload", status_code=400)
        self.pushes.append(payload)
        temp_to_real: dict[str, str] = {}

        for collection in payload.variable_collections:
            if collection.action == "CREATE":
                collection_id = self._next("VariableCollectionId:")
                mode_id = self._next("mode:")
                temp_to_real[collection.id] = collection_id
                temp_to_real[collection.initial_mode_id] = mode_id
                self.collections[collection_id] = {
                    "id": collection_id,
                    "name": collection.name,
                    "defaultModeId": mode_id,
                    "modes": [{"modeId": mode_id, "name": "Mode 1"}],
                }

        for mode in payload.variable_modes:
            collection_id = temp_to_real.get(mode.variable_collection_id, mode.variable_collection_id)
            if mode.action == "CREATE":
                mode_id = self._next("mode:")
                temp_to_real[mode.id] = mode_id
                self.collections[collection_id]["modes"].append(
                    {"modeId": mode_id, "name": mode.name}
                )

        for variable in payload.variables:
            if variable.action == "CREATE":
                variable_id = self._next("VariableID:")
                temp_to_real[variable.id] = variable_id
                self.variables[variable_id] = {
                    "id": variable_id,
                    "name": variable.name,
                    "variableCollectionId": temp_to_real.get(
                        variable.variable_collection_id, variable.variable_collection_id
                    ),
                }

        return PushResponse(temp_id_to_real_id=temp_to_real)


class MemoryMappingStore:
    """In-memory mapping store for testing."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, str]] = {}
        self.saves = 0
        self.fail_load = False
        self.fail_save = False

    def load(self, file_key: str) -> dict[str, str]:
        if self.fail_load:
            raise MappingStoreError(file_key, "not valid JSON")
        return dict(self.documents.get(file_key, {}))

    def save(self, file_key: str, mapping: dict[str, str]) -> Path:
        if self.fail_save:
            raise MappingStoreError(file_key, "disk full")
        self.saves += 1
        self.documents[file_key] = dict(mapping)
        return Path(f"/mappings/{file_key}.json")


class FakeRecorder:
    """Change recorder that remembers what it recorded."""

    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple[Path, str]] = []
        self.fail = fail

    def record(self, path: Path, file_key: str) -> bool:
        if self.fail:
            raise ChangeRecordError("not a git repository")
        self.calls.append((path, file_key))
        return True


@pytest.fixture
def api() -> FakeVariablesApi:
    return FakeVariablesApi()


@pytest.fixture
def store() -> MemoryMappingStore:
    return MemoryMappingStore()


@pytest.fixture
def system_data() -> dict[str, Any]:
    return {
        "systemId": "acme",
        "systemName": "Acme",
        "version": "1.0.0",
        "dimensions": [
            {
                "id": "scheme",
                "displayName": "Color Scheme",
                "defaultMode": "light",
                "modes": [{"id": "light", "name": "Light"}, {"id": "dark", "name": "Dark"}],
            }
        ],
        "dimensionOrder": ["scheme"],
        "tokenCollections": [
            {"id": "colors", "name": "Colors", "resolvedValueTypeIds": ["color"]}
        ],
        "resolvedValueTypes": [{"id": "color", "displayName": "Color", "type": "COLOR"}],
        "tokens": [
            {
                "id": "bg",
                "displayName": "Background",
                "resolvedValueTypeId": "color",
                "valuesByMode": [
                    {"modeIds": ["light"], "value": {"value": "#FFFFFF"}},
                    {"modeIds": ["dark"], "value": {"value": "#000000"}},
                ],
            },
            {
                "id": "brand",
                "displayName": "Brand",
                "resolvedValueTypeId": "color",
                "valuesByMode": [{"modeIds": [], "value": {"value": "#FF000080"}}],
            },
        ],
    }


def _input(system_data: dict[str, Any], **kwargs: Any) -> PublishInput:
    return PublishInput(file_key="FILE123", token_system=system_data, **kwargs)


# --- Success Tests ---


class TestPublishSuccess:
    """Test a complete run."""

    @pytest.mark.asyncio
    async def test_first_publish_creates_and_persists(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        recorder = FakeRecorder()

        output = await run_publish(_input(system_data), api, store, recorder)

        assert output.success is True
        assert output.error is None
        assert output.result is not None
        assert output.result.stats.created == 3
        assert len(api.pushes) == 1
        assert store.saves == 1
        assert output.mapping == store.documents["FILE123"]
        assert output.mapping["variable:bg"].startswith("VariableID:")
        assert output.merged > 0
        assert output.recorded is True
        assert recorder.calls == [(Path("/mappings/FILE123.json"), "FILE123")]

    @pytest.mark.asyncio
    async def test_second_publish_updates_everything(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        await run_publish(_input(system_data), api, store)

        output = await run_publish(_input(system_data), api, store)

        result = output.result
        assert result is not None
        assert {v.action for v in result.variables} == {"UPDATE"}
        assert {c.action for c in result.collections} == {"UPDATE"}
        assert {m.action for m in result.modes} == {"UPDATE"}
        assert result.stats.created == 0
        assert len(api.variables) == 3

    @pytest.mark.asyncio
    async def test_record_changes_disabled(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        recorder = FakeRecorder()

        output = await run_publish(
            _input(system_data, record_changes=False), api, store, recorder
        )

        assert output.success is True
        assert output.recorded is False
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_recorder_failure_is_only_a_warning(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        observer = CollectingObserver()

        output = await run_publish(
            _input(system_data), api, store, FakeRecorder(fail=True), observer
        )

        assert output.success is True
        assert output.recorded is False
        assert store.saves == 1
        assert [w.code for w in observer.warnings] == ["RECORD_FAILED"]


# --- Failure Tests ---


class TestPublishFailures:
    """Test each failure tier of the workflow."""

    @pytest.mark.asyncio
    async def test_missing_file_key(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        output = await run_publish(
            PublishInput(file_key="  ", token_system=system_data), api, store
        )

        assert output.success is False
        assert output.error is not None
        assert output.error.code == "MISSING_FILE_KEY"

    @pytest.mark.asyncio
    async def test_fetch_failure_aborts(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        api.fail_fetch = True

        output = await run_publish(_input(system_data), api, store)

        assert output.success is False
        assert output.error is not None
        assert output.error.code == "FETCH_FAILED"
        assert "503" in output.error.message
        assert output.result is None
        assert store.saves == 0

    @pytest.mark.asyncio
    async def test_mapping_load_failure(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        store.fail_load = True

        output = await run_publish(_input(system_data), api, store)

        assert output.error is not None
        assert output.error.code == "MAPPING_LOAD_FAILED"
        assert api.pushes == []

    @pytest.mark.asyncio
    async def test_validation_failure_never_pushes(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        del system_data["version"]

        output = await run_publish(_input(system_data), api, store)

        assert output.error is not None
        assert output.error.code == "VALIDATION_FAILED"
        assert output.result is not None
        assert output.result.errors[0].code == "MISSING_VERSION"
        assert api.pushes == []

    @pytest.mark.asyncio
    async def test_push_failure_keeps_result_and_mapping_file(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        """A failed push preserves the transform result and leaves the file alone."""
        store.documents["FILE123"] = {"stale": "VariableID:0:0"}
        api.fail_push = True

        output = await run_publish(_input(system_data), api, store)

        assert output.success is False
        assert output.error is not None
        assert output.error.code == "PUSH_FAILED"
        assert output.result is not None
        assert output.result.success is True
        assert len(output.result.variables) == 3
        assert store.saves == 0
        assert store.documents["FILE123"] == {"stale": "VariableID:0:0"}

    @pytest.mark.asyncio
    async def test_retry_after_push_failure_is_idempotent(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        api.fail_push = True
        failed = await run_publish(_input(system_data), api, store)
        api.fail_push = False

        retried = await run_publish(_input(system_data), api, store)

        assert failed.result is not None
        assert retried.result is not None
        assert failed.result.to_dict() == retried.result.to_dict()
        assert retried.success is True

    @pytest.mark.asyncio
    async def test_mapping_save_failure(
        self, api: FakeVariablesApi, store: MemoryMappingStore, system_data: dict[str, Any]
    ) -> None:
        store.fail_save = True

        output = await run_publish(_input(system_data), api, store)

        assert output.error is not None
        assert output.error.code == "MAPPING_SAVE_FAILED"
        assert output.mapping["variable:bg"].startswith("VariableID:")
