"""
Generated vendor variable graph and remote wire models.

Generated entities are recomputed from scratch every run; an UPDATE action is
a label on a freshly computed entity, never a diff. Serialise with
`model_dump(by_alias=True, exclude_none=True)` to get the POST body shape.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

Action = Literal["CREATE", "UPDATE"]
VariableType = Literal["COLOR", "FLOAT", "STRING", "BOOLEAN"]

ALL_SCOPES = "ALL_SCOPES"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Values ---


class ColorValue(WireModel):
    r: float
    g: float
    b: float
    a: float | None = None


class VariableAlias(WireModel):
    type: Literal["VARIABLE_ALIAS"] = "VARIABLE_ALIAS"
    id: str


ModeValue = ColorValue | VariableAlias | float | bool | str


# --- Generated entities ---


class Variable(WireModel):
    action: Action
    id: str
    name: str
    variable_collection_id: str = Field(alias="variableCollectionId")
    resolved_type: VariableType = Field(alias="resolvedType")
    scopes: list[str] = Field(default_factory=lambda: [ALL_SCOPES])
    hidden_from_publishing: bool = Field(default=False, alias="hiddenFromPublishing")
    description: str | None = None
    code_syntax: dict[str, str] | None = Field(default=None, alias="codeSyntax")


class VariableCollection(WireModel):
    action: Action
    id: str
    name: str
    initial_mode_id: str = Field(alias="initialModeId")
    hidden_from_publishing: bool = Field(default=False, alias="hiddenFromPublishing")


class VariableMode(WireModel):
    action: Action
    id: str
    name: str
    variable_collection_id: str = Field(alias="variableCollectionId")


class VariableModeValue(WireModel):
    variable_id: str = Field(alias="variableId")
    mode_id: str = Field(alias="modeId")
    value: ModeValue

    @property
    def is_alias(self) -> bool:
        return isinstance(self.value, VariableAlias)


class VariablesPayload(WireModel):
    """Body of the vendor `POST variables` call."""

    variable_collections: list[VariableCollection] = Field(
        default_factory=list, alias="variableCollections"
    )
    variable_modes: list[VariableMode] = Field(
        default_factory=list, alias="variableModes"
    )
    variables: list[Variable] = Field(default_factory=list)
    variable_mode_values: list[VariableModeValue] = Field(
        default_factory=list, alias="variableModeValues"
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Remote state ---


class RemoteVariable(WireModel):
    id: str
    name: str
    variable_collection_id: str | None = Field(
        default=None, alias="variableCollectionId"
    )


class RemoteMode(WireModel):
    mode_id: str = Field(alias="modeId")
    name: str


class RemoteCollection(WireModel):
    id: str
    name: str
    default_mode_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("defaultModeId", "initialModeId", "default_mode_id"),
        serialization_alias="defaultModeId",
    )
    modes: list[RemoteMode] = Field(default_factory=list)


class RemoteVariablesState(WireModel):
    """Existing variables and collections of one remote file."""

    variables: list[RemoteVariable] = Field(default_factory=list)
    variable_collections: list[RemoteCollection] = Field(
        default_factory=list, alias="variableCollections"
    )

    @classmethod
    def empty(cls) -> RemoteVariablesState:
        return cls()

    @classmethod
    def from_api_response(cls, body: dict[str, Any]) -> RemoteVariablesState:
        """
        Parse the `GET local variables` response.

        The vendor keys both maps by id under `meta`; plain lists are accepted too.
        """
        meta = body.get("meta", body) or {}
        variables = meta.get("variables") or {}
        collections = meta.get("variableCollections") or {}
        if isinstance(variables, dict):
            variables = list(variables.values())
        if isinstance(collections, dict):
            collections = list(collections.values())
        return cls.model_validate(
            {"variables": variables, "variableCollections": collections}
        )


class PushResponse(WireModel):
    temp_id_to_real_id: dict[str, str] = Field(
        default_factory=dict, alias="tempIdToRealId"
    )

    @classmethod
    def from_api_response(cls, body: dict[str, Any]) -> PushResponse:
        meta = body.get("meta", body) or {}
        return cls.model_validate(meta)
