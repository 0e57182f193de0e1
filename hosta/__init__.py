"""
hosta: emulate declared functions with a language model

A function is declared by its name, docstring, parameter hints and return
type; a model imagines the return value and hosta coerces it to that type.
"""
from hosta.core.analyzer import (
    UNSET,
    HostaAnalysis,
    HostaArgument,
    encode_function,
    get_hosta_signature,
    hosta_analyze,
    hosta_analyze_update,
    set_hosta_signature,
)
from hosta.core.config import (
    HostaConfig,
    Settings,
    default_config,
    get_settings,
    reload_dotenv,
    reset_default_config,
    set_default_config,
)
from hosta.core.inspection import HostaInspection, InspectionRegistry, default_registry, get_hosta_inspection
from hosta.core.logger import print_last_decoding, print_last_prompt
from hosta.core.meta_prompt import EMULATE_META_PROMPT, USER_CALL_META_PROMPT, MetaPrompt
from hosta.core.type_converter import (
    ArrayDescriptor,
    ClassDescriptor,
    CustomDescriptor,
    DictDescriptor,
    EnumDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    TupleDescriptor,
    TypeDescriptor,
    UnionDescriptor,
    coerce,
    describe_type_as_python,
    describe_type_as_schema,
    descriptor_from_annotation,
    nice_type_name,
    type_returned_data,
)
from hosta.exec.ask import ask
from hosta.exec.closure import closure
from hosta.exec.emulate import emulate
from hosta.models.base_model import Model, ModelCapabilities
from hosta.models.openai_compatible import OpenAICompatibleModel
from hosta.pipelines.simple_pipeline import OneTurnConversationPipeline, Pipeline
from hosta.semantics.operators import test
from hosta.utils.errors import (
    AggregateUnionFailure,
    ContractViolation,
    FrameError,
    HostaError,
    RateLimited,
    RequestFailed,
    TypeMismatch,
    Unauthorized,
)

__version__ = "0.1.0"

__all__ = [
    "UNSET", "HostaAnalysis", "HostaArgument", "encode_function", "get_hosta_signature",
    "hosta_analyze", "hosta_analyze_update", "set_hosta_signature",
    "HostaConfig", "Settings", "default_config", "get_settings", "reload_dotenv",
    "reset_default_config", "set_default_config",
    "HostaInspection", "InspectionRegistry", "default_registry", "get_hosta_inspection",
    "print_last_decoding", "print_last_prompt",
    "EMULATE_META_PROMPT", "USER_CALL_META_PROMPT", "MetaPrompt",
    "ArrayDescriptor", "ClassDescriptor", "CustomDescriptor", "DictDescriptor", "EnumDescriptor",
    "LiteralDescriptor", "ObjectDescriptor", "TupleDescriptor", "TypeDescriptor", "UnionDescriptor",
    "coerce", "describe_type_as_python", "describe_type_as_schema", "descriptor_from_annotation",
    "nice_type_name", "type_returned_data",
    "ask", "closure", "emulate",
    "Model", "ModelCapabilities", "OpenAICompatibleModel",
    "OneTurnConversationPipeline", "Pipeline",
    "test",
    "AggregateUnionFailure", "ContractViolation", "FrameError", "HostaError", "RateLimited",
    "RequestFailed", "TypeMismatch", "Unauthorized",
]
