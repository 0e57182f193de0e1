"""
Debug printers for the last emulated call of a function
"""
from typing import Any, Callable, Optional

from hosta.core.inspection import HostaInspection, InspectionRegistry, default_registry

NO_PROMPT_MESSAGE = "No prompt found for this function."


def _lookup(target: Any, registry: Optional[InspectionRegistry]) -> Optional[HostaInspection]:
    if isinstance(target, HostaInspection):
        return target
    if not callable(target):
        return None
    if registry is None:
        registry = default_registry
    return registry.get(target)


def print_last_prompt(target: Callable, registry: Optional[InspectionRegistry] = None) -> None:
    """Print the model and the messages of the last emulated call"""
    inspection = _lookup(target, registry)
    if inspection is None or inspection.model is None:
        print(NO_PROMPT_MESSAGE)
        return
    inspection.model.print_last_prompt(inspection)


def print_last_decoding(target: Callable, registry: Optional[InspectionRegistry] = None) -> None:
    """Print the reasoning, answer and decoded value of the last emulated call"""
    inspection = _lookup(target, registry)
    if inspection is None or inspection.pipeline is None:
        print(NO_PROMPT_MESSAGE)
        return
    inspection.pipeline.print_last_decoding(inspection)
