"""
Publish component - Remote publish workflow.

Shell Layer - wires adapters into one workflow run.
"""

from __future__ import annotations

from tokensync.core.ports.observer import TransformObserverPort

from ._impl import PublishWorkflow
from .models import PublishInput, PublishOutput
from .ports import ChangeRecorderPort, MappingStorePort, VariablesApiPort


async def run_publish(
    input_data: PublishInput,
    api: VariablesApiPort,
    store: MappingStorePort,
    recorder: ChangeRecorderPort | None = None,
    observer: TransformObserverPort | None = None,
) -> PublishOutput:
    """
    Publish a token system to a remote file.

    Returns:
        PublishOutput; on a push failure the transform result is kept and
        the persisted mapping is left untouched.
    """
    workflow = PublishWorkflow(api, store, recorder=recorder, observer=observer)
    return await workflow.run(input_data)
