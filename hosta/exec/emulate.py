"""
Emulation of a declared function by a language model
"""
from typing import Any, Callable, Dict, Mapping, Optional

from hosta.core.config import HostaConfig, default_config
from hosta.core.inspection import HostaInspection, InspectionRegistry, default_registry
from hosta.core.logging_config import LoggingConfig
from hosta.core.type_converter import TypeDescriptor, describe_type_as_schema
from hosta.models.base_model import ModelResponse
from hosta.pipelines.simple_pipeline import Pipeline
from hosta.utils.errors import ContractViolation

logger = LoggingConfig.get_logger(__name__)


def _resolve_pipeline(config: Optional[HostaConfig], pipeline: Optional[Pipeline]) -> Pipeline:
    if pipeline is not None:
        return pipeline
    return (config or default_config()).pipeline


def build_llm_args(
    pipeline: Pipeline,
    inspection: HostaInspection,
    force_llm_args: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Arguments for the model call: pipeline defaults, then per-call overrides

    Native JSON output is requested only for object-shaped return types, since
    provider JSON modes reject bare scalars.
    """
    llm_args = {**pipeline.llm_args, **(force_llm_args or {})}
    if inspection.prompt_data.get("use_json_mode") and inspection.analysis.type is not None:
        if describe_type_as_schema(inspection.analysis.type).get("type") == "object":
            llm_args.setdefault("force_json_output", True)
    return llm_args


async def run_inspection(
    inspection: HostaInspection,
    pipeline: Pipeline,
    force_llm_args: Optional[Dict[str, Any]] = None,
) -> Any:
    """One push, one model call, one pull"""
    messages = pipeline.push(inspection)
    model = inspection.model
    if model is None:
        raise ContractViolation("Pipeline did not attach a model to the inspection.")

    logger.debug(
        f"Emulating {inspection.analysis.name}",
        extra={"function_name": inspection.analysis.name},
    )
    response: ModelResponse = await model.api_call(messages, build_llm_args(pipeline, inspection, force_llm_args))
    return pipeline.pull(inspection, response)


async def emulate(
    fn: Callable,
    args: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[HostaConfig] = None,
    pipeline: Optional[Pipeline] = None,
    force_return_type: Optional[TypeDescriptor] = None,
    force_llm_args: Optional[Dict[str, Any]] = None,
    doc: Optional[str] = None,
    name: Optional[str] = None,
    registry: Optional[InspectionRegistry] = None,
) -> Any:
    """
    Ask a model for a plausible return value of fn called with args

    Typical use is from inside the declared function itself::

        async def capital(country: str) -> str:
            \"\"\"Return the capital of a country\"\"\"
            return await emulate(capital, locals())

    Args:
        fn: The declared function; its signature, hints and docstring describe the call
        args: Values of the call by parameter name
        config: Configuration providing the pipeline (default_config() when omitted)
        pipeline: Pipeline overriding the one from config
        force_return_type: Return type overriding the declared one
        force_llm_args: Extra arguments for this model call
        doc: Documentation overriding the docstring
        name: Name overriding fn.__name__
        registry: Inspection registry (the process-wide one when omitted)

    Returns:
        The model's answer coerced to the return type

    Raises:
        TypeMismatch: If the answer cannot be coerced
        RequestFailed: If the model call fails
    """
    pipeline = _resolve_pipeline(config, pipeline)
    if registry is None:
        registry = default_registry
    inspection = registry.get_or_create(
        fn, args, doc=doc, name=name, return_type=force_return_type
    )
    if inspection.analysis.type is None:
        inspection.analysis.type = "string"
    return await run_inspection(inspection, pipeline, force_llm_args)
