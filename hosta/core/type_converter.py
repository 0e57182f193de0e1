"""
Type descriptors and the coercion / projection engine

A TypeDescriptor is either one of six primitive tags or a frozen pydantic model
discriminated by ``kind``. The engine turns raw model output into typed values
(type_returned_data) and projects descriptors into a JSON schema, a readable
type name and Python type definitions for prompts.
"""
import ast
import collections.abc
import dataclasses
import enum
import inspect
import json
import math
import re
import types
import typing
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Set, Type, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from hosta.utils.errors import AggregateUnionFailure, TypeMismatch

PrimitiveType = Literal["any", "string", "number", "integer", "boolean", "null"]
PRIMITIVE_TYPES = frozenset(typing.get_args(PrimitiveType))


class _Descriptor(BaseModel):
    """Common configuration of structured descriptors"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, populate_by_name=True)


class ArrayDescriptor(_Descriptor):
    kind: Literal["array"] = "array"
    items: Optional["TypeDescriptor"] = None


class TupleDescriptor(_Descriptor):
    kind: Literal["tuple"] = "tuple"
    items: List["TypeDescriptor"] = Field(default_factory=list)
    rest: Optional["TypeDescriptor"] = None


class DictDescriptor(_Descriptor):
    kind: Literal["dict"] = "dict"
    value: "TypeDescriptor" = "any"


class ObjectDescriptor(_Descriptor):
    kind: Literal["object"] = "object"
    properties: Optional[Dict[str, "TypeDescriptor"]] = None
    additional_properties: Union[bool, "TypeDescriptor", None] = Field(
        default=None, alias="additionalProperties"
    )


class EnumDescriptor(_Descriptor):
    kind: Literal["enum"] = "enum"
    values: List[Union[str, int, float]]


class UnionDescriptor(_Descriptor):
    """Alternatives are tried in declared order: list restrictive types before permissive ones"""
    kind: Literal["union"] = "union"
    any_of: List["TypeDescriptor"] = Field(alias="anyOf")


class LiteralDescriptor(_Descriptor):
    kind: Literal["literal"] = "literal"
    value: Any = None


class CustomDescriptor(_Descriptor):
    """Escape hatch: parsing is fully delegated to ``parse``"""
    kind: Literal["custom"] = "custom"
    parse: Callable[[str], Any]
    describe: Optional[Callable[[], Any]] = None
    name: str = "custom"


class ClassDescriptor(_Descriptor):
    """Binds a descriptor to a constructible type, with an optional from-plain-data hook"""
    kind: Literal["class"] = "class"
    target: Type[Any]
    from_plain: Optional[Callable[[Any], Any]] = None


StructuredDescriptor = Annotated[
    Union[
        ArrayDescriptor,
        TupleDescriptor,
        DictDescriptor,
        ObjectDescriptor,
        EnumDescriptor,
        UnionDescriptor,
        LiteralDescriptor,
        CustomDescriptor,
        ClassDescriptor,
    ],
    Field(discriminator="kind"),
]

TypeDescriptor = Union[PrimitiveType, StructuredDescriptor]

for _model in (
    ArrayDescriptor, TupleDescriptor, DictDescriptor, ObjectDescriptor, EnumDescriptor,
    UnionDescriptor, LiteralDescriptor, CustomDescriptor, ClassDescriptor,
):
    _model.model_rebuild()

_DESCRIPTOR_ADAPTER: TypeAdapter = TypeAdapter(TypeDescriptor)

JsonSchema = Dict[str, Any]


def is_primitive(descriptor: Any) -> bool:
    return isinstance(descriptor, str) and descriptor in PRIMITIVE_TYPES


def as_descriptor(value: Any) -> TypeDescriptor:
    """
    Normalize anything describing a type into a TypeDescriptor

    Accepts descriptors, primitive tags, plain dicts in descriptor shape
    (``{"kind": "array", "items": "integer"}``) and Python type annotations.
    """
    if isinstance(value, _Descriptor) or is_primitive(value):
        return value
    if isinstance(value, dict):
        return _DESCRIPTOR_ADAPTER.validate_python(value)
    if isinstance(value, str):
        raise ValueError(f"Unknown primitive type descriptor: {value!r}")
    return descriptor_from_annotation(value)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _normalize_literal(value: Any) -> Any:
    """Turn tuples and sets produced by literal_eval into lists, recursively"""
    if isinstance(value, (tuple, set, frozenset, list)):
        return [_normalize_literal(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_literal(item) for key, item in value.items()}
    return value


def _plain_scalars(value: Any) -> Any:
    """
    Type the string scalars of a BaseLoader document with JSON rules only

    ``1``, ``2.5``, ``true`` and ``null`` become values; ``yes`` or
    ``2024-01-01`` stay text.
    """
    if isinstance(value, list):
        return [_plain_scalars(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain_scalars(item) for key, item in value.items()}
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return value
        if decoded is None or isinstance(decoded, (bool, int, float)):
            return decoded
    return value


def _loose_parse(raw: str) -> Any:
    """
    Three-tier structured parse

    Strict JSON first, then lenient syntaxes (Python literals, YAML flow
    collections with unquoted keys or trailing commas), then the trimmed text.
    The YAML tier uses BaseLoader so no YAML 1.1 implicit typing applies.
    """
    trimmed = raw.strip()
    if trimmed == "":
        return ""
    try:
        return json.loads(trimmed)
    except ValueError:
        pass
    try:
        return _normalize_literal(ast.literal_eval(trimmed))
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
        pass
    if trimmed[0] in "{[":
        try:
            parsed = yaml.load(trimmed, Loader=yaml.BaseLoader)
        except yaml.YAMLError:
            parsed = None
        if isinstance(parsed, (dict, list)):
            return _plain_scalars(parsed)
    return trimmed


def _to_text(value: Any) -> str:
    """Serialize an already parsed element so it can be coerced recursively"""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def _ensure_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _ensure_mapping(value: Any, descriptor_name: str) -> Dict[Any, Any]:
    if isinstance(value, dict):
        return value
    raise TypeMismatch(
        f"Expected {descriptor_name} when converting LLM response, got {type(value).__name__}"
    )


def _unquote(text: str) -> str:
    """Decode one pair of matching quotes, escapes included, falling back to stripping them"""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        if text[0] == '"':
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, str):
                return decoded
        try:
            decoded = ast.literal_eval(text)
        except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
            decoded = None
        if isinstance(decoded, str):
            return decoded
        return text[1:-1]
    return text


def _strict_equal(left: Any, right: Any) -> bool:
    """Deep equality where True, 1 and "1" are all different"""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(_strict_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(_strict_equal(left[key], right[key]) for key in left)
    return left == right


def _parse_number(text: str, descriptor: str) -> Union[int, float]:
    # int() and float() accept digit separators, JSON numbers do not
    if "_" in text:
        raise TypeMismatch(f"Expected {descriptor}, got {text}")
    try:
        value: Union[int, float] = int(text)
    except ValueError:
        try:
            value = float(text)
        except ValueError:
            raise TypeMismatch(f"Expected {descriptor}, got {text}") from None
    if descriptor == "integer" and isinstance(value, float):
        if not math.isfinite(value):
            raise TypeMismatch(f"Expected integer, got {text}")
        value = int(value)
    return value


def _coerce_primitive(raw: str, descriptor: str) -> Any:
    trimmed = raw.strip()
    if descriptor == "any":
        return _loose_parse(trimmed)
    if descriptor == "string":
        return _unquote(trimmed)
    if descriptor in ("number", "integer"):
        return _parse_number(trimmed, descriptor)
    if descriptor == "boolean":
        if re.fullmatch(r"true|false", trimmed, flags=re.IGNORECASE):
            return trimmed.lower() == "true"
        raise TypeMismatch(f"Expected boolean, got {trimmed}")
    if descriptor == "null":
        if trimmed in ("null", "None"):
            return None
        raise TypeMismatch(f"Expected null, got {trimmed}")
    return trimmed


def _construct(descriptor: ClassDescriptor, parsed: Any) -> Any:
    try:
        if descriptor.from_plain is not None:
            return descriptor.from_plain(parsed)
        if isinstance(parsed, dict):
            return descriptor.target(**parsed)
        return descriptor.target(parsed)
    except (TypeError, ValueError, KeyError) as e:
        raise TypeMismatch(
            f"Cannot build {descriptor.target.__name__} from {parsed!r}: {e}"
        ) from e


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

def type_returned_data(raw: str, descriptor: TypeDescriptor = "any") -> Any:
    """
    Convert raw text into a value satisfying the descriptor

    Args:
        raw: Text produced by the model (already stripped of reasoning and fences)
        descriptor: Expected type

    Returns:
        The typed value

    Raises:
        TypeMismatch: If the text cannot satisfy the descriptor
        AggregateUnionFailure: If no union alternative accepts the text
    """
    if isinstance(descriptor, str):
        return _coerce_primitive(raw, descriptor)

    if isinstance(descriptor, CustomDescriptor):
        return descriptor.parse(raw)

    if isinstance(descriptor, ClassDescriptor):
        return _construct(descriptor, _loose_parse(raw))

    if isinstance(descriptor, LiteralDescriptor):
        parsed = _loose_parse(raw)
        if not _strict_equal(parsed, descriptor.value):
            raise TypeMismatch(f"Expected literal {descriptor.value!r}, got {parsed!r}")
        return descriptor.value

    if isinstance(descriptor, EnumDescriptor):
        parsed = _coerce_primitive(raw, "string")
        for member in descriptor.values:
            if member == parsed or (not isinstance(member, str) and str(member) == parsed):
                return member
        raise TypeMismatch(
            f"Expected one of {', '.join(str(v) for v in descriptor.values)}, got {parsed}"
        )

    if isinstance(descriptor, ArrayDescriptor):
        items = _ensure_list(_loose_parse(raw))
        if descriptor.items is None:
            return items
        return [type_returned_data(_to_text(item), descriptor.items) for item in items]

    if isinstance(descriptor, TupleDescriptor):
        items = _ensure_list(_loose_parse(raw))
        expected = descriptor.items
        if descriptor.rest is None and len(items) != len(expected):
            raise TypeMismatch(f"Expected tuple of length {len(expected)}, got {len(items)}")
        result = []
        for index, item in enumerate(items):
            element = expected[index] if index < len(expected) else descriptor.rest
            result.append(type_returned_data(_to_text(item), element))
        return result

    if isinstance(descriptor, DictDescriptor):
        parsed = _ensure_mapping(_loose_parse(raw), "dict-like value")
        return {
            key: type_returned_data(_to_text(value), descriptor.value)
            for key, value in parsed.items()
        }

    if isinstance(descriptor, ObjectDescriptor):
        parsed = _ensure_mapping(_loose_parse(raw), "an object")
        properties = descriptor.properties or {}
        result: Dict[Any, Any] = {}
        for key, prop in properties.items():
            if key in parsed:
                result[key] = type_returned_data(_to_text(parsed[key]), prop)
        additional = descriptor.additional_properties
        if additional is not None and additional is not False:
            for key, value in parsed.items():
                if key in properties:
                    continue
                result[key] = value if additional is True else type_returned_data(_to_text(value), additional)
        return result

    if isinstance(descriptor, UnionDescriptor):
        errors: List[str] = []
        for option in descriptor.any_of:
            try:
                return type_returned_data(raw, option)
            except Exception as e:
                errors.append(str(e))
        raise AggregateUnionFailure(errors)

    return _loose_parse(raw)


coerce = type_returned_data


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

_PRIMITIVE_SCHEMAS: Dict[str, JsonSchema] = {
    "any": {},
    "string": {"type": "string"},
    "number": {"type": "number"},
    "integer": {"type": "integer"},
    "boolean": {"type": "boolean"},
    "null": {"type": "null"},
}


def describe_type_as_schema(descriptor: TypeDescriptor) -> JsonSchema:
    """Project a descriptor into a JSON-schema shaped dict"""
    if isinstance(descriptor, str):
        return dict(_PRIMITIVE_SCHEMAS.get(descriptor, {"type": "string"}))

    if isinstance(descriptor, ArrayDescriptor):
        return {
            "type": "array",
            "items": describe_type_as_schema(descriptor.items) if descriptor.items is not None else {},
        }
    if isinstance(descriptor, TupleDescriptor):
        return {
            "type": "array",
            "prefixItems": [describe_type_as_schema(item) for item in descriptor.items],
            "items": describe_type_as_schema(descriptor.rest) if descriptor.rest is not None else False,
        }
    if isinstance(descriptor, DictDescriptor):
        return {"type": "object", "additionalProperties": describe_type_as_schema(descriptor.value)}
    if isinstance(descriptor, ObjectDescriptor):
        schema: JsonSchema = {"type": "object"}
        if descriptor.properties is not None:
            schema["properties"] = {
                key: describe_type_as_schema(value) for key, value in descriptor.properties.items()
            }
        additional = descriptor.additional_properties
        if additional is not None:
            schema["additionalProperties"] = (
                additional if isinstance(additional, bool) else describe_type_as_schema(additional)
            )
        return schema
    if isinstance(descriptor, EnumDescriptor):
        return {"enum": list(descriptor.values)}
    if isinstance(descriptor, UnionDescriptor):
        return {"anyOf": [describe_type_as_schema(option) for option in descriptor.any_of]}
    if isinstance(descriptor, LiteralDescriptor):
        return {"const": descriptor.value}
    if isinstance(descriptor, ClassDescriptor):
        target = descriptor.target
        if isinstance(target, type) and issubclass(target, BaseModel):
            return target.model_json_schema()
        if isinstance(target, type) and issubclass(target, enum.Enum):
            return {"title": target.__name__, "enum": [member.value for member in target]}
        return {"type": "object", "title": target.__name__}
    if isinstance(descriptor, CustomDescriptor):
        if descriptor.describe is not None:
            described = descriptor.describe()
            if isinstance(described, dict):
                return described
            return {"description": str(described)}
        return {"description": "custom type"}
    return {}


def nice_type_name(descriptor: TypeDescriptor) -> str:
    """Human readable type name, e.g. ``Array<string>`` or ``{ a: number; b: string }``"""
    if isinstance(descriptor, str):
        return descriptor
    if isinstance(descriptor, ArrayDescriptor):
        inner = nice_type_name(descriptor.items) if descriptor.items is not None else "unknown"
        return f"Array<{inner}>"
    if isinstance(descriptor, TupleDescriptor):
        parts = [nice_type_name(item) for item in descriptor.items]
        if descriptor.rest is not None:
            parts.append(f"...{nice_type_name(descriptor.rest)}[]")
        return f"[{', '.join(parts)}]"
    if isinstance(descriptor, DictDescriptor):
        return f"{{ [key: string]: {nice_type_name(descriptor.value)} }}"
    if isinstance(descriptor, ObjectDescriptor):
        if not descriptor.properties:
            return "object"
        fields = "; ".join(f"{key}: {nice_type_name(value)}" for key, value in descriptor.properties.items())
        return f"{{ {fields} }}"
    if isinstance(descriptor, EnumDescriptor):
        return f"Enum<{'|'.join(str(v) for v in descriptor.values)}>"
    if isinstance(descriptor, UnionDescriptor):
        return " | ".join(nice_type_name(option) for option in descriptor.any_of)
    if isinstance(descriptor, LiteralDescriptor):
        return _to_text(descriptor.value)
    if isinstance(descriptor, ClassDescriptor):
        return descriptor.target.__name__
    if isinstance(descriptor, CustomDescriptor):
        return descriptor.name
    return "unknown"


project_schema = describe_type_as_schema
project_name = nice_type_name


_PRIMITIVE_ANNOTATIONS = {
    "any": "Any",
    "string": "str",
    "number": "float",
    "integer": "int",
    "boolean": "bool",
    "null": "None",
}


def pascal_case(text: str) -> str:
    parts = re.split(r"[^0-9A-Za-z]+", text)
    name = "".join(part[:1].upper() + part[1:] for part in parts if part)
    if not name or name[0].isdigit():
        name = f"T{name}"
    return name


class _PythonTypeWriter:
    """Renders descriptors as Python annotations, collecting the class definitions they need"""

    def __init__(self):
        self.definitions: List[str] = []
        self._defined: Set[str] = set()

    def _define(self, name: str, text: str) -> None:
        if name not in self._defined:
            self._defined.add(name)
            self.definitions.append(text)

    def annotation(self, descriptor: TypeDescriptor, hint: str) -> str:
        if isinstance(descriptor, str):
            return _PRIMITIVE_ANNOTATIONS.get(descriptor, "Any")
        if isinstance(descriptor, ArrayDescriptor):
            inner = self.annotation(descriptor.items, f"{hint}Item") if descriptor.items is not None else "Any"
            return f"List[{inner}]"
        if isinstance(descriptor, TupleDescriptor):
            parts = [self.annotation(item, f"{hint}Item{i}") for i, item in enumerate(descriptor.items)]
            if descriptor.rest is not None:
                rest = self.annotation(descriptor.rest, f"{hint}Rest")
                if not parts:
                    return f"Tuple[{rest}, ...]"
                parts.append(f"*Tuple[{rest}, ...]")
            return f"Tuple[{', '.join(parts)}]" if parts else "Tuple[()]"
        if isinstance(descriptor, DictDescriptor):
            return f"Dict[str, {self.annotation(descriptor.value, f'{hint}Value')}]"
        if isinstance(descriptor, ObjectDescriptor):
            if not descriptor.properties:
                return "Dict[str, Any]"
            fields = [
                (key, self.annotation(value, f"{hint}{pascal_case(key)}"))
                for key, value in descriptor.properties.items()
            ]
            if all(key.isidentifier() for key, _ in fields):
                body = "\n".join(f"    {key}: {ann}" for key, ann in fields)
                self._define(hint, f"class {hint}(TypedDict, total=False):\n{body}")
            else:
                entries = ", ".join(f"{key!r}: {ann}" for key, ann in fields)
                self._define(hint, f"{hint} = TypedDict({hint!r}, {{{entries}}}, total=False)")
            return hint
        if isinstance(descriptor, EnumDescriptor):
            members = ", ".join(repr(v) for v in descriptor.values)
            self._define(hint, f"{hint} = Literal[{members}]")
            return hint
        if isinstance(descriptor, UnionDescriptor):
            options = [self.annotation(option, f"{hint}Option{i}") for i, option in enumerate(descriptor.any_of)]
            others = [option for option in options if option != "None"]
            if len(options) == 2 and len(others) == 1:
                return f"Optional[{others[0]}]"
            return f"Union[{', '.join(options)}]"
        if isinstance(descriptor, LiteralDescriptor):
            return f"Literal[{descriptor.value!r}]"
        if isinstance(descriptor, ClassDescriptor):
            self._define_class(descriptor.target)
            return descriptor.target.__name__
        return "Any"

    def _define_class(self, target: type) -> None:
        name = target.__name__
        if name in self._defined:
            return
        if issubclass(target, enum.Enum):
            body = "\n".join(f"    {member.name} = {member.value!r}" for member in target)
            self._define(name, f"class {name}(Enum):\n{body or '    pass'}")
            return
        if issubclass(target, BaseModel):
            hints = {key: field.annotation for key, field in target.model_fields.items()}
        elif dataclasses.is_dataclass(target):
            hints = {field.name: field.type for field in dataclasses.fields(target)}
        else:
            return
        # reserve the name first so self-referencing fields terminate
        self._defined.add(name)
        lines = []
        for key, hint in hints.items():
            try:
                field_descriptor = descriptor_from_annotation(hint)
            except (TypeError, ValueError):
                field_descriptor = "any"
            lines.append(f"    {key}: {self.annotation(field_descriptor, f'{name}{pascal_case(key)}')}")
        self.definitions.append(f"class {name}:\n" + ("\n".join(lines) or "    pass"))


def python_type_annotation(descriptor: TypeDescriptor, hint: str = "Type") -> str:
    """One-line Python annotation for a descriptor"""
    return _PythonTypeWriter().annotation(descriptor, hint)


def describe_type_as_python(descriptor: Optional[TypeDescriptor], name: str = "Type") -> str:
    """
    Python-syntax type definitions needed to understand a descriptor

    Returns an empty string for primitives (they are self-describing).
    """
    if descriptor is None or is_primitive(descriptor):
        return ""
    writer = _PythonTypeWriter()
    annotation = writer.annotation(descriptor, name)
    if writer.definitions:
        return "\n\n".join(writer.definitions)
    return f"{name} = {annotation}"


# ---------------------------------------------------------------------------
# Python annotations -> descriptors
# ---------------------------------------------------------------------------

_SEQUENCE_ORIGINS = (
    list, set, frozenset, collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet, collections.abc.Iterable,
    collections.abc.Collection,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _enum_from_plain(target: Type[enum.Enum]) -> Callable[[Any], Any]:
    def convert(value: Any) -> Any:
        try:
            return target(value)
        except ValueError:
            pass
        if isinstance(value, str):
            key = value.split(".")[-1]
            if key in target.__members__:
                return target[key]
        raise TypeMismatch(f"Expected one of {[m.value for m in target]}, got {value!r}")
    return convert


def descriptor_from_annotation(annotation: Any) -> TypeDescriptor:
    """
    Build a descriptor from a Python type annotation

    ``Optional[X]`` lists ``null`` first so that the literal token None is not
    swallowed by a permissive alternative such as ``str``.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return "any"
    if annotation is None or annotation is type(None):
        return "null"
    if annotation is str:
        return "string"
    if annotation is bool:
        return "boolean"
    if annotation is int:
        return "integer"
    if annotation is float:
        return "number"

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is Annotated:
        return descriptor_from_annotation(args[0])
    if origin is Literal:
        if len(args) == 1:
            return LiteralDescriptor(value=args[0])
        if all(isinstance(a, (str, int, float)) and not isinstance(a, bool) for a in args):
            return EnumDescriptor(values=list(args))
        return UnionDescriptor(any_of=[LiteralDescriptor(value=a) for a in args])
    if origin is Union or (hasattr(types, "UnionType") and origin is getattr(types, "UnionType")):
        options = [descriptor_from_annotation(a) for a in args]
        options.sort(key=lambda d: d != "null")
        return UnionDescriptor(any_of=options)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TupleDescriptor(items=[], rest=descriptor_from_annotation(args[0]))
        if args == ((),):
            return TupleDescriptor(items=[])
        return TupleDescriptor(items=[descriptor_from_annotation(a) for a in args])
    if origin in _SEQUENCE_ORIGINS:
        return ArrayDescriptor(items=descriptor_from_annotation(args[0]) if args else None)
    if origin in _MAPPING_ORIGINS:
        return DictDescriptor(value=descriptor_from_annotation(args[1]) if len(args) == 2 else "any")

    if annotation in (list, set, frozenset):
        return ArrayDescriptor()
    if annotation is dict:
        return DictDescriptor(value="any")
    if annotation is tuple:
        return TupleDescriptor(items=[], rest="any")

    if inspect.isclass(annotation):
        if issubclass(annotation, enum.Enum):
            return ClassDescriptor(target=annotation, from_plain=_enum_from_plain(annotation))
        if typing.is_typeddict(annotation):
            hints = typing.get_type_hints(annotation)
            return ObjectDescriptor(
                properties={key: descriptor_from_annotation(hint) for key, hint in hints.items()},
                additional_properties=False,
            )
        if issubclass(annotation, BaseModel):
            return ClassDescriptor(target=annotation, from_plain=annotation.model_validate)
        return ClassDescriptor(target=annotation)

    return "any"


def stringify_value(value: Any) -> str:
    """Literal text of a bound argument value, in Python syntax"""
    if isinstance(value, enum.Enum):
        return f"{type(value).__name__}.{value.name}"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<binary data: {len(bytes(value))} bytes>"
    if isinstance(value, BaseModel):
        return repr(value.model_dump())
    return repr(value)
