"""
Publish component - Remote publish workflow.
"""

from ._impl import PublishWorkflow
from .component import run_publish
from .models import PublishError, PublishInput, PublishOutput
from .ports import ChangeRecorderPort, MappingStorePort, VariablesApiPort

__all__ = [
    # Entry points
    "run_publish",
    # Input models
    "PublishInput",
    # Output models
    "PublishOutput",
    "PublishError",
    # Ports
    "VariablesApiPort",
    "MappingStorePort",
    "ChangeRecorderPort",
    # Functional core
    "PublishWorkflow",
]
