from pydantic import BaseModel, Field, field_validator

from tokensync.components.values import ColorProfile


class ApiRules(BaseModel):
    base_url: str = "https://api.figma.com"
    timeout_seconds: float = Field(default=30.0, gt=0)
    access_token_env: str = "FIGMA_ACCESS_TOKEN"

class MappingRules(BaseModel):
    directory: str = ".figma/mappings"
    record_changes: bool = True
    commit_message: str = "Update Figma mappings for file {file_key}"

    @field_validator("commit_message")
    @classmethod
    def only_file_key_field(cls, value: str) -> str:
        try:
            value.format(file_key="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"commit_message may only use {{file_key}}: {e!r}") from e
        return value

class TransformRules(BaseModel):
    color_profile: ColorProfile = ColorProfile.SRGB
    naming_platform: str = "Figma"

    @field_validator("color_profile", mode="before")
    @classmethod
    def parse_profile(cls, value: object) -> ColorProfile:
        if value is None or isinstance(value, str | ColorProfile):
            return ColorProfile.parse(value)
        raise ValueError(f"Unsupported color profile: {value!r}")

class LoggingRules(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


class Rules(BaseModel):
    api: ApiRules = Field(default_factory=ApiRules)
    mappings: MappingRules = Field(default_factory=MappingRules)
    transform: TransformRules = Field(default_factory=TransformRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)
