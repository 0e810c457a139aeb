"""
Canonical design-token model.

Immutable inputs to one transformation run, parsed from the authoring
tool's JSON export. Keys are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---

StandardValueType = Literal[
    "COLOR",
    "DIMENSION",
    "SPACING",
    "FONT_FAMILY",
    "FONT_WEIGHT",
    "FONT_SIZE",
    "LINE_HEIGHT",
    "LETTER_SPACING",
    "DURATION",
    "CUBIC_BEZIER",
    "BLUR",
    "SPREAD",
    "RADIUS",
    "OPACITY",
    "NUMBER",
    "BOOLEAN",
    "STRING",
]


class CanonicalModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


# --- Value types & property types ---


class ResolvedValueType(CanonicalModel):
    id: str
    display_name: str = Field(alias="displayName")
    type: str | None = None  # usually a StandardValueType


class PlatformMappings(CanonicalModel):
    figma: list[str] = Field(default_factory=list)


class PropertyType(CanonicalModel):
    id: str
    display_name: str | None = Field(default=None, alias="displayName")
    category: str | None = None
    compatible_value_types: list[str] = Field(
        default_factory=list, alias="compatibleValueTypes"
    )
    platform_mappings: PlatformMappings | None = Field(
        default=None, alias="platformMappings"
    )


# --- Dimensions ---


class Mode(CanonicalModel):
    id: str
    name: str
    dimension_id: str | None = Field(default=None, alias="dimensionId")


class Dimension(CanonicalModel):
    id: str
    display_name: str = Field(alias="displayName")
    modes: list[Mode] = Field(min_length=1)
    default_mode: str = Field(alias="defaultMode")
    description: str | None = None
    required: bool = False

    def mode_ids(self) -> list[str]:
        return [mode.id for mode in self.modes]

    def mode_by_id(self, mode_id: str) -> Mode | None:
        return next((m for m in self.modes if m.id == mode_id), None)


# --- Collections & platforms ---


class TokenCollection(CanonicalModel):
    id: str
    name: str
    resolved_value_type_ids: list[str] = Field(
        default_factory=list, alias="resolvedValueTypeIds"
    )
    description: str | None = None
    private: bool = False


class Platform(CanonicalModel):
    id: str
    display_name: str = Field(alias="displayName")


# --- Tokens ---


class TokenValue(CanonicalModel):
    """
    A token value: a literal (`{"value": ...}`) or an alias (`{"tokenId": ...}`).
    """

    value: Any = None
    token_id: str | None = Field(default=None, alias="tokenId")

    @property
    def is_alias(self) -> bool:
        return self.token_id is not None


class ValueByMode(CanonicalModel):
    mode_ids: list[str] = Field(default_factory=list, alias="modeIds")
    value: TokenValue

    @property
    def is_global(self) -> bool:
        return not self.mode_ids


class CodeSyntax(CanonicalModel):
    platform_id: str = Field(alias="platformId")
    formatted_name: str = Field(alias="formattedName")


class Token(CanonicalModel):
    id: str
    display_name: str = Field(alias="displayName")
    description: str | None = None
    token_collection_id: str | None = Field(default=None, alias="tokenCollectionId")
    resolved_value_type_id: str = Field(alias="resolvedValueTypeId")
    private: bool = False
    # Property types arrive either as ids or as embedded objects
    property_types: list[PropertyType | str] = Field(
        default_factory=list, alias="propertyTypes"
    )
    code_syntax: list[CodeSyntax] = Field(default_factory=list, alias="codeSyntax")
    values_by_mode: list[ValueByMode] = Field(min_length=1, alias="valuesByMode")

    def referenced_mode_ids(self) -> set[str]:
        return {mode_id for entry in self.values_by_mode for mode_id in entry.mode_ids}


# --- Token System ---


class TokenSystem(CanonicalModel):
    system_id: str = Field(alias="systemId")
    system_name: str = Field(alias="systemName")
    version: str
    description: str | None = None
    dimensions: list[Dimension] = Field(default_factory=list)
    dimension_order: list[str] = Field(default_factory=list, alias="dimensionOrder")
    token_collections: list[TokenCollection] = Field(
        default_factory=list, alias="tokenCollections"
    )
    tokens: list[Token] = Field(default_factory=list)
    platforms: list[Platform] = Field(default_factory=list)
    resolved_value_types: list[ResolvedValueType] = Field(
        default_factory=list, alias="resolvedValueTypes"
    )
    property_types: list[PropertyType] = Field(
        default_factory=list, alias="propertyTypes"
    )

    def token_by_id(self, token_id: str) -> Token | None:
        return next((t for t in self.tokens if t.id == token_id), None)

    def dimension_by_id(self, dimension_id: str) -> Dimension | None:
        return next((d for d in self.dimensions if d.id == dimension_id), None)

    def dimension_for_mode(self, mode_id: str) -> Dimension | None:
        return next((d for d in self.dimensions if d.mode_by_id(mode_id)), None)

    def collection_by_id(self, collection_id: str) -> TokenCollection | None:
        return next((c for c in self.token_collections if c.id == collection_id), None)

    def value_type_by_id(self, value_type_id: str) -> ResolvedValueType | None:
        return next((v for v in self.resolved_value_types if v.id == value_type_id), None)

    def platform_by_id(self, platform_id: str) -> Platform | None:
        return next((p for p in self.platforms if p.id == platform_id), None)

    def property_type_by_id(self, property_type_id: str) -> PropertyType | None:
        return next((p for p in self.property_types if p.id == property_type_id), None)
