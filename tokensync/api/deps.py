import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, HTTPException, status

from tokensync.adapters.figma_api import FigmaVariablesApi
from tokensync.adapters.fs.mapping_store import JsonMappingStore
from tokensync.adapters.git_recorder import GitChangeRecorder
from tokensync.adapters.log_observer import LoggingObserver
from tokensync.components.publish import ChangeRecorderPort, MappingStorePort, VariablesApiPort
from tokensync.core.ports.observer import TransformObserverPort
from tokensync.rules.loader import get_access_token, load_rules
from tokensync.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(os.environ.get("TOKENSYNC_RULES", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    if not settings.rules_path.exists():
        return Rules()
    return load_rules(settings.rules_path)


# --- Adapters ---
def get_variables_api(rules: Rules = Depends(get_rules)) -> VariablesApiPort:
    token = get_access_token(rules)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{rules.api.access_token_env} is not set",
        )
    return FigmaVariablesApi(
        token, base_url=rules.api.base_url, timeout=rules.api.timeout_seconds
    )


def get_mapping_store(rules: Rules = Depends(get_rules)) -> MappingStorePort:
    return JsonMappingStore(rules.mappings.directory)


def get_change_recorder(rules: Rules = Depends(get_rules)) -> ChangeRecorderPort | None:
    if not rules.mappings.record_changes:
        return None
    return GitChangeRecorder(message_template=rules.mappings.commit_message)


def get_observer() -> TransformObserverPort:
    return LoggingObserver()
