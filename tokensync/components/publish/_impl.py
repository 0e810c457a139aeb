"""
PublishWorkflow - Fetch, reconcile, transform, push, persist.

Steps run strictly in order because each consumes ids only known after
the previous one completes:

1. fetch remote state
2. load the persisted mapping
3. prune it against remote state (inside the transform)
4. transform
5. push
6. merge remote-assigned ids
7. save the mapping
8. optionally record the change

A failed push leaves the mapping file untouched. The workflow provides no
mutual exclusion; callers serialise runs per mapping file.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from tokensync.components.identity import IdentityStore
from tokensync.components.transform import TransformInput, TransformOutput, run_transform
from tokensync.core.ports.observer import NullObserver, TransformObserverPort
from tokensync.core.ports.remote import ChangeRecordError, MappingStoreError, VariablesApiError

from .models import PublishError, PublishInput, PublishOutput
from .ports import ChangeRecorderPort, MappingStorePort, VariablesApiPort


def _failed(
    code: str,
    message: str,
    result: TransformOutput | None = None,
    mapping: dict[str, str] | None = None,
    pruned: tuple[str, ...] = (),
    merged: int = 0,
) -> PublishOutput:
    return PublishOutput(
        success=False,
        result=result,
        mapping=mapping or {},
        pruned=pruned,
        merged=merged,
        error=PublishError(code=code, message=message),
    )


class PublishWorkflow:
    """
    Publish workflow.

    One instance drives one run; it owns the identity store for that run.
    """

    def __init__(
        self,
        api: VariablesApiPort,
        store: MappingStorePort,
        recorder: ChangeRecorderPort | None = None,
        observer: TransformObserverPort | None = None,
    ) -> None:
        """Initialize workflow."""
        self._api = api
        self._store = store
        self._recorder = recorder
        self._observer = observer or NullObserver()
        self._identity = IdentityStore()

    async def run(self, input_data: PublishInput) -> PublishOutput:
        file_key = input_data.file_key.strip()
        if not file_key:
            return _failed("MISSING_FILE_KEY", "A remote file key is required")

        try:
            remote_state = await self._api.fetch_local_variables(file_key)
        except VariablesApiError as e:
            return _failed("FETCH_FAILED", f"Could not fetch remote variables: {e}")
        self._observer.info(
            "Fetched remote state",
            file_key=file_key,
            variables=len(remote_state.variables),
            collections=len(remote_state.variable_collections),
        )

        try:
            persisted = self._store.load(file_key)
        except MappingStoreError as e:
            return _failed("MAPPING_LOAD_FAILED", str(e))

        result = run_transform(
            TransformInput(
                token_system=input_data.token_system,
                remote_state=remote_state,
                persisted_mapping=persisted,
                color_profile=input_data.color_profile,
                naming_platform=input_data.naming_platform,
            ),
            observer=self._observer,
            identity=self._identity,
        )
        if not result.success:
            return _failed(
                "VALIDATION_FAILED",
                result.error.message if result.error else "Token system failed validation",
                result=result,
            )

        try:
            response = await self._api.push_variables(file_key, result.payload())
        except VariablesApiError as e:
            # Mapping file stays as it was so a retry starts from the same state
            return _failed(
                "PUSH_FAILED",
                f"Could not push variables: {e}",
                result=result,
                mapping=result.mapping,
                pruned=result.pruned,
            )

        merged = self._identity.merge_remote_assigned_ids(response.temp_id_to_real_id)
        mapping = self._identity.snapshot()

        try:
            path = self._store.save(file_key, mapping)
        except MappingStoreError as e:
            return _failed(
                "MAPPING_SAVE_FAILED",
                str(e),
                result=result,
                mapping=mapping,
                pruned=result.pruned,
                merged=merged,
            )
        self._observer.info("Saved mapping", file_key=file_key, path=str(path), merged=merged)

        recorded = await self._record(path, file_key) if input_data.record_changes else False

        return PublishOutput(
            success=True,
            result=result,
            mapping=mapping,
            mapping_path=path,
            pruned=result.pruned,
            merged=merged,
            recorded=recorded,
        )

    async def _record(self, path: Path, file_key: str) -> bool:
        if self._recorder is None:
            return False
        try:
            return await asyncio.to_thread(self._recorder.record, path, file_key)
        except ChangeRecordError as e:
            self._observer.warn(
                "RECORD_FAILED",
                f"Mapping saved but the change could not be recorded: {e}",
                file_key=file_key,
            )
            return False
