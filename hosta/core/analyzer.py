"""
Call analysis: describes a function call and encodes it into prompt variables

A HostaAnalysis is built either from an explicit signature attached to the
callable (set_hosta_signature) or from runtime introspection of its Python
signature, type hints and docstring.
"""
import inspect
import json
import typing
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING, Union

from hosta.core.logging_config import LoggingConfig
from hosta.core.type_converter import (
    TypeDescriptor,
    as_descriptor,
    describe_type_as_python,
    describe_type_as_schema,
    descriptor_from_annotation,
    is_primitive,
    nice_type_name,
    pascal_case,
    python_type_annotation,
    stringify_value,
)

if TYPE_CHECKING:
    from hosta.core.inspection import HostaInspection

logger = LoggingConfig.get_logger(__name__)

HOSTA_SIGNATURE_ATTRIBUTE = "__hosta_signature__"

# literals longer than this are declared as variables before the call
INLINE_VALUE_MAX_LENGTH = 20


class _Unset:
    """Marker for an argument without a bound value (a bound None is a real value)"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()


@dataclass
class HostaArgument:
    """One parameter of an analyzed call"""
    name: str
    type: Optional[TypeDescriptor] = None
    value: Any = UNSET

    @property
    def has_value(self) -> bool:
        return self.value is not UNSET


@dataclass
class HostaAnalysis:
    """Name, documentation, parameters and return type of an analyzed call"""
    name: str
    args: List[HostaArgument] = field(default_factory=list)
    type: Optional[TypeDescriptor] = None
    doc: Optional[str] = None

    def get_arg(self, name: str) -> Optional[HostaArgument]:
        for arg in self.args:
            if arg.name == name:
                return arg
        return None


SignatureLike = Union[HostaAnalysis, Mapping[str, Any]]


def _coerce_argument(arg: Union[HostaArgument, Mapping[str, Any]]) -> HostaArgument:
    if isinstance(arg, HostaArgument):
        descriptor = as_descriptor(arg.type) if arg.type is not None else None
        return HostaArgument(name=arg.name, type=descriptor, value=arg.value)
    descriptor = arg.get("type")
    return HostaArgument(
        name=arg["name"],
        type=as_descriptor(descriptor) if descriptor is not None else None,
        value=arg.get("value", UNSET),
    )


def _signature_as_dict(signature: Optional[SignatureLike]) -> Dict[str, Any]:
    if signature is None:
        return {}
    if isinstance(signature, HostaAnalysis):
        entries = {
            "name": signature.name,
            "args": signature.args,
            "type": signature.type,
            "doc": signature.doc,
        }
    else:
        entries = dict(signature)
    # unset fields leave introspection in charge
    return {key: value for key, value in entries.items() if value is not None}


def set_hosta_signature(fn: Callable, signature: SignatureLike) -> Callable:
    """
    Attach an explicit (possibly partial) signature to a callable

    Keys: ``name``, ``doc``, ``type`` and ``args`` (HostaArgument objects or
    ``{"name", "type"}`` mappings). Explicit entries win over introspection.

    Returns:
        The callable itself, so this can be used as a decorator helper
    """
    setattr(fn, HOSTA_SIGNATURE_ATTRIBUTE, _signature_as_dict(signature))
    return fn


def get_hosta_signature(fn: Callable) -> Optional[Dict[str, Any]]:
    """Explicit signature attached to a callable, if any"""
    return getattr(fn, HOSTA_SIGNATURE_ATTRIBUTE, None)


def _type_hints(fn: Callable) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(fn, include_extras=True)
    except (NameError, TypeError, AttributeError) as e:
        # unresolved forward references: fall back to raw annotations
        logger.debug(f"Could not resolve type hints of {fn!r}: {e}")
        return dict(getattr(fn, "__annotations__", None) or {})


def _annotation_descriptor(annotation: Any) -> Optional[TypeDescriptor]:
    if annotation is inspect.Parameter.empty or isinstance(annotation, str):
        return None
    return descriptor_from_annotation(annotation)


def _introspect(fn: Callable) -> Dict[str, Any]:
    """Arguments, return type and docstring read from the callable itself"""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return {"args": [], "type": None, "doc": inspect.getdoc(fn)}

    hints = _type_hints(fn)
    args = []
    for param in signature.parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, param.annotation)
        default = UNSET if param.default is inspect.Parameter.empty else param.default
        args.append(HostaArgument(name=param.name, type=_annotation_descriptor(annotation), value=default))

    return_annotation = hints.get("return", signature.return_annotation)
    return {
        "args": args,
        "type": _annotation_descriptor(return_annotation),
        "doc": inspect.getdoc(fn),
    }


def _bind_values(args: List[HostaArgument], values: Optional[Mapping[str, Any]]) -> List[HostaArgument]:
    if not values:
        return args
    by_name = {arg.name: arg for arg in args}
    for name, value in values.items():
        if name in by_name:
            by_name[name].value = value
        else:
            arg = HostaArgument(name=name, value=value)
            args.append(arg)
            by_name[name] = arg
    return args


def hosta_analyze(
    fn: Callable,
    args: Optional[Mapping[str, Any]] = None,
    signature_override: Optional[SignatureLike] = None,
) -> HostaAnalysis:
    """
    Analyze a callable and bind call values to its parameters

    Args:
        fn: Callable being emulated
        args: Values by parameter name; unknown names are appended as untyped arguments
        signature_override: Explicit entries taking precedence over everything else

    Returns:
        A fresh HostaAnalysis
    """
    explicit = {**(get_hosta_signature(fn) or {}), **_signature_as_dict(signature_override)}
    introspected = None if "args" in explicit and "type" in explicit else _introspect(fn)

    if "args" in explicit and explicit["args"] is not None:
        arguments = [_coerce_argument(arg) for arg in explicit["args"]]
    else:
        arguments = list(introspected["args"]) if introspected else []

    if explicit.get("type") is not None:
        return_type = as_descriptor(explicit["type"])
    else:
        return_type = introspected["type"] if introspected else None

    doc = explicit["doc"] if "doc" in explicit else inspect.getdoc(fn)
    name = explicit.get("name") or getattr(fn, "__name__", None) or "anonymous"

    return HostaAnalysis(
        name=name,
        args=_bind_values(arguments, args),
        type=return_type,
        doc=doc,
    )


def hosta_analyze_update(args: Mapping[str, Any], inspection: "HostaInspection") -> HostaAnalysis:
    """Rebind argument values on an existing analysis, keeping declaration order"""
    analysis = inspection.analysis
    return replace(
        analysis,
        args=[
            replace(arg, value=args[arg.name] if arg.name in args else arg.value)
            for arg in analysis.args
        ],
    )


# ---------------------------------------------------------------------------
# Encoding into template variables
# ---------------------------------------------------------------------------

def encode_function_documentation(analysis: HostaAnalysis) -> Dict[str, Any]:
    return {
        "function_name": analysis.name,
        "function_doc": analysis.doc or "",
    }


def _argument_hints(analysis: HostaAnalysis) -> Dict[str, str]:
    """Python type name per argument; arguments sharing a type share the first one's name"""
    by_type: Dict[str, str] = {}
    hints: Dict[str, str] = {}
    for arg in analysis.args:
        if arg.type is None:
            continue
        hints[arg.name] = by_type.setdefault(nice_type_name(arg.type), pascal_case(arg.name))
    return hints


def encode_function_parameter_types(analysis: HostaAnalysis) -> Dict[str, Any]:
    """Python and JSON-schema definitions of every distinct non-primitive argument type"""
    python_definitions: Dict[str, str] = {}
    json_definitions: Dict[str, Any] = {}
    hints = _argument_hints(analysis)

    for arg in analysis.args:
        if arg.type is None or is_primitive(arg.type):
            continue
        type_name = nice_type_name(arg.type)
        python_doc = describe_type_as_python(arg.type, hints[arg.name])
        if python_doc and type_name not in python_definitions:
            python_definitions[type_name] = python_doc
        schema = describe_type_as_schema(arg.type)
        if schema and type_name not in json_definitions:
            json_definitions[type_name] = schema

    return {
        "python_type_definition_dict": "\n".join(
            f"```python\n# definition of type {name}:\n{definition}\n```"
            for name, definition in python_definitions.items()
        ),
        "json_schema_type_definition_dict": "\n\n".join(
            f"# JSON Schema of type {name}:\n```json\n{_dump_schema(schema)}\n```"
            for name, schema in json_definitions.items()
        ),
    }


def encode_function_parameter_values(analysis: HostaAnalysis) -> Dict[str, Any]:
    """Inline short literals in the call, declare long ones as variables first"""
    variable_definitions: List[str] = []
    call_arguments: List[str] = []

    for arg in analysis.args:
        if not arg.has_value:
            call_arguments.append(arg.name)
            continue
        literal = stringify_value(arg.value)
        if len(literal) > INLINE_VALUE_MAX_LENGTH:
            variable_definitions.append(f"{arg.name} = {literal}")
            call_arguments.append(arg.name)
        else:
            call_arguments.append(f"{arg.name} = {literal}")

    return {
        "variables_initialization": "\n\n".join(variable_definitions),
        "function_call_arguments": ", ".join(call_arguments),
    }


def encode_function_parameter_names(analysis: HostaAnalysis) -> Dict[str, Any]:
    inline_args = []
    python_args = []
    hints = _argument_hints(analysis)
    for arg in analysis.args:
        if arg.type is None:
            inline_args.append(arg.name)
            python_args.append(arg.name)
            continue
        inline_args.append(f"{arg.name}: {nice_type_name(arg.type)}")
        python_args.append(f"{arg.name}: {python_type_annotation(arg.type, hints[arg.name])}")

    return {
        "function_args": ", ".join(inline_args),
        "function_python_args": ", ".join(python_args),
    }


def _return_hint(analysis: HostaAnalysis) -> str:
    return f"{pascal_case(analysis.name)}Return"


def encode_function_return_type(analysis: HostaAnalysis) -> Dict[str, Any]:
    if analysis.type is None:
        return {
            "function_return_type": None,
            "function_return_type_name": "",
            "function_return_python_annotation": "Any",
        }
    return {
        "function_return_type": analysis.type,
        "function_return_type_name": nice_type_name(analysis.type),
        "function_return_python_annotation": python_type_annotation(analysis.type, _return_hint(analysis)),
    }


def encode_function_return_type_definition(analysis: HostaAnalysis) -> Dict[str, Any]:
    if analysis.type is None:
        return {"function_return_as_python_type": "", "function_return_as_json_schema": None}
    return {
        "function_return_as_python_type": describe_type_as_python(analysis.type, _return_hint(analysis)),
        "function_return_as_json_schema": _dump_schema(describe_type_as_schema(analysis.type)),
    }


def _dump_schema(schema: Any) -> str:
    return json.dumps(schema, indent=2, ensure_ascii=False, default=str)


_ENCODERS = (
    encode_function_documentation,
    encode_function_parameter_types,
    encode_function_parameter_values,
    encode_function_parameter_names,
    encode_function_return_type,
    encode_function_return_type_definition,
)


def encode_function(analysis: HostaAnalysis, capabilities: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Project an analysis into the flat variable map consumed by the templates

    Args:
        analysis: The call to encode
        capabilities: Capabilities of the target model (currently unused by the encoders)

    Returns:
        Template variables (function_name, function_call_arguments, ...)
    """
    variables: Dict[str, Any] = {}
    for encoder in _ENCODERS:
        variables.update(encoder(analysis))
    logger.debug(
        f"Encoded call to {analysis.name}",
        extra={"function_name": analysis.name, "arg_count": len(analysis.args)},
    )
    return variables
