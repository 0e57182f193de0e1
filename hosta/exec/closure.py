"""
Closures: anonymous functions described by a natural language query
"""
from typing import Any, Awaitable, Callable, Dict, Optional

from hosta.core.analyzer import HostaArgument
from hosta.core.config import HostaConfig
from hosta.core.inspection import InspectionRegistry, default_registry
from hosta.core.type_converter import ArrayDescriptor, ObjectDescriptor, TypeDescriptor, as_descriptor
from hosta.exec.emulate import _resolve_pipeline, run_inspection
from hosta.pipelines.simple_pipeline import Pipeline
from hosta.utils.image import is_binary_like

LAMBDA_FUNCTION_NAME = "lambda_function"


def infer_type_descriptor(value: Any) -> TypeDescriptor:
    """Descriptor guessed from a runtime value"""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if is_binary_like(value):
        return "any"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ArrayDescriptor(items="any")
    if isinstance(value, dict):
        return ObjectDescriptor(additional_properties=True)
    return "any"


def closure(
    query: str,
    *,
    config: Optional[HostaConfig] = None,
    pipeline: Optional[Pipeline] = None,
    force_return_type: Optional[TypeDescriptor] = None,
    force_llm_args: Optional[Dict[str, Any]] = None,
    registry: Optional[InspectionRegistry] = None,
) -> Callable[..., Awaitable[Any]]:
    """
    Build an async callable whose behaviour is described by query

    Keyword arguments given to the callable become typed parameters of the
    emulated call::

        is_polite = closure("Is this message polite?", force_return_type="boolean")
        await is_polite(message="Thanks a lot!")

    Returns:
        ``async inner(**kwargs)``
    """
    return_type = as_descriptor(force_return_type) if force_return_type is not None else "string"
    if registry is None:
        registry = default_registry

    async def inner(**kwargs: Any) -> Any:
        pipe = _resolve_pipeline(config, pipeline)
        inspection = registry.get_or_create(inner, doc=query, return_type=return_type)
        analysis = inspection.analysis
        analysis.name = LAMBDA_FUNCTION_NAME
        analysis.doc = query
        analysis.args = [
            HostaArgument(name=key, type=infer_type_descriptor(value), value=value)
            for key, value in kwargs.items()
        ]
        return await run_inspection(inspection, pipe, force_llm_args)

    inner.__name__ = LAMBDA_FUNCTION_NAME
    inner.__qualname__ = LAMBDA_FUNCTION_NAME
    inner.__doc__ = query
    return inner
