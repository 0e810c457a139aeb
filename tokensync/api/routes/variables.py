"""Routes for transforming and publishing token systems."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from tokensync.api.deps import (
    get_change_recorder,
    get_mapping_store,
    get_observer,
    get_rules,
    get_variables_api,
)
from tokensync.components.publish import (
    ChangeRecorderPort,
    MappingStorePort,
    PublishInput,
    VariablesApiPort,
    run_publish,
)
from tokensync.components.transform import TransformInput, run_transform
from tokensync.components.values import ColorProfile
from tokensync.core.ports.observer import TransformObserverPort
from tokensync.domain.variables import RemoteVariablesState
from tokensync.rules.models import Rules

router = APIRouter()

# Publish failure code -> HTTP status
PUBLISH_ERROR_STATUS = {
    "MISSING_FILE_KEY": 422,
    "VALIDATION_FAILED": 422,
    "FETCH_FAILED": status.HTTP_502_BAD_GATEWAY,
    "PUSH_FAILED": status.HTTP_502_BAD_GATEWAY,
    "MAPPING_LOAD_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "MAPPING_SAVE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# --- Request Models ---


class TransformRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_system: dict[str, Any] = Field(alias="tokenSystem")
    remote_state: dict[str, Any] | None = Field(default=None, alias="remoteState")
    mapping: dict[str, str] = Field(default_factory=dict)
    color_profile: str | None = Field(default=None, alias="colorProfile")


class PublishRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_key: str = Field(alias="fileKey")
    token_system: dict[str, Any] = Field(alias="tokenSystem")
    color_profile: str | None = Field(default=None, alias="colorProfile")
    record_changes: bool | None = Field(default=None, alias="recordChanges")


def _profile(raw: str | None, rules: Rules) -> ColorProfile:
    if raw is None:
        return rules.transform.color_profile
    try:
        return ColorProfile.parse(raw)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"Unsupported color profile: {raw}",
        ) from None


# --- Routes ---


@router.post("/transform")
def transform_variables(
    body: TransformRequest,
    rules: Rules = Depends(get_rules),
    observer: TransformObserverPort = Depends(get_observer),
) -> dict[str, Any]:
    """Build the variables payload without contacting the remote."""
    remote_state = (
        RemoteVariablesState.from_api_response(body.remote_state)
        if body.remote_state
        else RemoteVariablesState.empty()
    )
    result = run_transform(
        TransformInput(
            token_system=body.token_system,
            remote_state=remote_state,
            persisted_mapping=body.mapping,
            color_profile=_profile(body.color_profile, rules),
            naming_platform=rules.transform.naming_platform,
        ),
        observer=observer,
    )
    if not result.success:
        raise HTTPException(
            status_code=422,
            detail=result.to_dict(),
        )
    return {**result.to_dict(), "mapping": result.mapping}


@router.post("/publish")
async def publish_variables(
    body: PublishRequest,
    rules: Rules = Depends(get_rules),
    api: VariablesApiPort = Depends(get_variables_api),
    store: MappingStorePort = Depends(get_mapping_store),
    recorder: ChangeRecorderPort | None = Depends(get_change_recorder),
    observer: TransformObserverPort = Depends(get_observer),
) -> dict[str, Any]:
    """Fetch, transform, push and persist for one remote file."""
    record_changes = (
        rules.mappings.record_changes if body.record_changes is None else body.record_changes
    )
    output = await run_publish(
        PublishInput(
            file_key=body.file_key,
            token_system=body.token_system,
            color_profile=_profile(body.color_profile, rules),
            naming_platform=rules.transform.naming_platform,
            record_changes=record_changes,
        ),
        api,
        store,
        recorder,
        observer,
    )
    if not output.success:
        code = output.error.code if output.error else ""
        raise HTTPException(
            status_code=PUBLISH_ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=output.to_dict(),
        )
    return output.to_dict()
