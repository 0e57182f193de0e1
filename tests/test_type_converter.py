"""
Tests for the type descriptor coercion and projection engine
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, TypedDict

import pytest
from pydantic import BaseModel, ValidationError

from hosta.core.type_converter import (
    ArrayDescriptor,
    ClassDescriptor,
    CustomDescriptor,
    DictDescriptor,
    EnumDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    TupleDescriptor,
    UnionDescriptor,
    as_descriptor,
    describe_type_as_python,
    describe_type_as_schema,
    descriptor_from_annotation,
    nice_type_name,
    python_type_annotation,
    stringify_value,
    type_returned_data,
)
from hosta.utils.errors import AggregateUnionFailure, TypeMismatch


class Color(Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Point:
    x: int
    y: int


class Person(BaseModel):
    name: str
    age: int


class Movie(TypedDict):
    title: str
    year: int


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def test_string_unwraps_one_pair_of_quotes():
    """Matching quotes around the text are removed"""
    assert type_returned_data('"hello"', "string") == "hello"
    assert type_returned_data("'hello'", "string") == "hello"
    assert type_returned_data("  plain text \n", "string") == "plain text"
    # mismatched quotes are kept
    assert type_returned_data("\"hello'", "string") == "\"hello'"


def test_string_never_fails():
    """Any text is a valid string"""
    assert type_returned_data("{not: json", "string") == "{not: json"
    assert type_returned_data("", "string") == ""


def test_integer_parsing_and_truncation():
    """Integers parse and floats truncate toward zero"""
    assert type_returned_data("42", "integer") == 42
    assert type_returned_data(" 3.9 ", "integer") == 3
    assert type_returned_data("-3.9", "integer") == -3


def test_number_parsing():
    """Numbers keep their fractional part"""
    assert type_returned_data("2.5", "number") == 2.5
    assert type_returned_data("7", "number") == 7


@pytest.mark.parametrize("raw", ["abc", "true", "", "1,5", "1_000"])
def test_number_rejects_non_numeric_text(raw):
    """Non numeric text raises TypeMismatch"""
    with pytest.raises(TypeMismatch):
        type_returned_data(raw, "number")


def test_boolean_is_case_insensitive():
    """true/false in any case"""
    assert type_returned_data("TRUE", "boolean") is True
    assert type_returned_data(" false ", "boolean") is False
    with pytest.raises(TypeMismatch):
        type_returned_data("yes", "boolean")


def test_null_accepts_null_and_none():
    """Both JSON and Python spellings of null"""
    assert type_returned_data("null", "null") is None
    assert type_returned_data("None", "null") is None
    with pytest.raises(TypeMismatch):
        type_returned_data("nil", "null")


def test_integer_rejects_digit_separators():
    """Only plain numeric literals are accepted"""
    with pytest.raises(TypeMismatch):
        type_returned_data("1_000", "integer")


def test_string_decodes_python_escapes():
    """Single-quoted answers are decoded like Python literals"""
    assert type_returned_data("'a\\nb'", "string") == "a\nb"
    assert type_returned_data("'it\\'s'", "string") == "it's"
    # undecodable text only loses its quotes
    assert type_returned_data("'a' 'b' +'", "string") == "a' 'b' +"


@pytest.mark.parametrize("value, descriptor", [
    ("hello", "string"),
    ("", "string"),
    ("  padded  ", "string"),
    ("a\nb", "string"),
    ("tab\there", "string"),
    ("back\\slash", "string"),
    ("it's", "string"),
    ('say "hi"', "string"),
    ("it's \"both\"\n", "string"),
    ("café", "string"),
    (0, "integer"),
    (-7, "integer"),
    (10 ** 20, "integer"),
    (1.5, "number"),
    (-0.25, "number"),
    (1e-10, "number"),
    (2.0, "number"),
    (3, "number"),
    (True, "boolean"),
    (False, "boolean"),
    (None, "null"),
])
def test_primitive_values_survive_stringify_and_coerce(value, descriptor):
    """Bound values rendered into a prompt come back unchanged"""
    result = type_returned_data(stringify_value(value), descriptor)
    assert result == value
    assert type(result) is type(value)


def test_type_mismatch_is_a_type_error():
    """Coercion failures can be caught as TypeError"""
    with pytest.raises(TypeError):
        type_returned_data("abc", "integer")


# ---------------------------------------------------------------------------
# "any" and the lenient parse
# ---------------------------------------------------------------------------

def test_any_parses_strict_json():
    """Strict JSON is tried first"""
    assert type_returned_data('{"a": 1, "b": [true, null]}') == {"a": 1, "b": [True, None]}


def test_any_accepts_python_literals():
    """Python literal syntax is accepted"""
    assert type_returned_data("{'a': True, 'b': None}") == {"a": True, "b": None}
    assert type_returned_data("(1, 2)") == [1, 2]


def test_any_accepts_unquoted_keys_and_trailing_commas():
    """Flow syntax with bare keys is accepted"""
    assert type_returned_data("{a: 1, b: two}") == {"a": 1, "b": "two"}
    assert type_returned_data("[1, 2,]") == [1, 2]


def test_lenient_parse_keeps_bare_words_and_dates_as_text():
    """No YAML implicit typing: yes/no/on and dates stay strings"""
    descriptor = ObjectDescriptor(properties={"d": "string", "flag": "string"})
    assert type_returned_data("{d: 2024-01-01, flag: yes}", descriptor) == {"d": "2024-01-01", "flag": "yes"}
    assert type_returned_data("[yes, no, on]", ArrayDescriptor(items="string")) == ["yes", "no", "on"]
    assert type_returned_data("{a: true, b: null, c: 2.5, d: off}") == {"a": True, "b": None, "c": 2.5, "d": "off"}


def test_any_falls_back_to_trimmed_text():
    """Unparseable text comes back as the trimmed string"""
    assert type_returned_data("  just some words  ") == "just some words"


# ---------------------------------------------------------------------------
# Structured descriptors
# ---------------------------------------------------------------------------

def test_array_coerces_elements():
    """Elements are coerced against items"""
    assert type_returned_data("[1, 2.7, 3]", ArrayDescriptor(items="integer")) == [1, 2, 3]
    assert type_returned_data('["a", "b"]', ArrayDescriptor(items="string")) == ["a", "b"]


def test_array_wraps_a_single_value():
    """A scalar answer becomes a one element list"""
    assert type_returned_data("5", ArrayDescriptor(items="integer")) == [5]
    assert type_returned_data('{"a": 1}', ArrayDescriptor()) == [{"a": 1}]


def test_tuple_enforces_arity_without_rest():
    """Length must match when there is no rest type"""
    descriptor = TupleDescriptor(items=["string", "integer"])
    assert type_returned_data('["a", 1]', descriptor) == ["a", 1]
    with pytest.raises(TypeMismatch):
        type_returned_data('["a"]', descriptor)
    with pytest.raises(TypeMismatch):
        type_returned_data('["a", 1, 2]', descriptor)


def test_tuple_rest_absorbs_overflow():
    """Extra elements are coerced against rest"""
    descriptor = TupleDescriptor(items=["string"], rest="integer")
    assert type_returned_data('["a", 1, 2.2]', descriptor) == ["a", 1, 2]


def test_dict_coerces_values_and_keeps_keys():
    """Values follow the value descriptor"""
    descriptor = DictDescriptor(value="integer")
    assert type_returned_data('{"x": 1, "y": 2.7}', descriptor) == {"x": 1, "y": 2}
    with pytest.raises(TypeMismatch):
        type_returned_data("[1, 2]", descriptor)


def test_object_keeps_declared_properties_only():
    """Undeclared keys are dropped unless additional properties are allowed"""
    descriptor = ObjectDescriptor(properties={"a": "number", "b": "string"})
    raw = '{"a": 1, "b": "x", "c": true}'
    assert type_returned_data(raw, descriptor) == {"a": 1, "b": "x"}
    # absent properties are omitted, not defaulted
    assert type_returned_data('{"a": 2}', descriptor) == {"a": 2}


def test_object_additional_properties():
    """True passes extra keys through, a descriptor coerces them"""
    passthrough = ObjectDescriptor(properties={"a": "number"}, additional_properties=True)
    assert type_returned_data('{"a": 1, "c": true}', passthrough) == {"a": 1, "c": True}

    typed = ObjectDescriptor.model_validate(
        {"properties": {"a": "number"}, "additionalProperties": "string"}
    )
    assert type_returned_data('{"a": 1, "c": true}', typed) == {"a": 1, "c": "true"}


def test_object_requires_a_mapping():
    """A list is not an object"""
    with pytest.raises(TypeMismatch):
        type_returned_data("[1]", ObjectDescriptor(properties={"a": "number"}))


def test_enum_membership():
    """Answers must be one of the declared values"""
    descriptor = EnumDescriptor(values=["red", "green"])
    assert type_returned_data('"green"', descriptor) == "green"
    assert type_returned_data("red", descriptor) == "red"
    with pytest.raises(TypeMismatch):
        type_returned_data("blue", descriptor)


def test_enum_numeric_members_match_their_text():
    """The declared numeric member is returned"""
    assert type_returned_data("2", EnumDescriptor(values=[1, 2])) == 2


def test_literal_requires_deep_equality():
    """Literal answers compare after parsing"""
    assert type_returned_data('"yes"', LiteralDescriptor(value="yes")) == "yes"
    assert type_returned_data("[1, 2]", LiteralDescriptor(value=[1, 2])) == [1, 2]
    with pytest.raises(TypeMismatch):
        type_returned_data("no", LiteralDescriptor(value="yes"))


@pytest.mark.parametrize("raw, value", [
    ("1", True),
    ("true", 1),
    ('"1"', 1),
    ("[1, 0]", [True, False]),
    ('{"a": 1}', {"a": True}),
])
def test_literal_does_not_mix_booleans_numbers_and_text(raw, value):
    """True, 1 and "1" are different literals"""
    with pytest.raises(TypeMismatch):
        type_returned_data(raw, LiteralDescriptor(value=value))


def test_literal_numbers_compare_by_value():
    """1 and 1.0 are the same number"""
    assert type_returned_data("1.0", LiteralDescriptor(value=1)) == 1
    assert type_returned_data("true", LiteralDescriptor(value=True)) is True


def test_custom_receives_raw_text():
    """Custom parsers get the text unmodified"""
    descriptor = CustomDescriptor(parse=lambda text: text[::-1], name="Reversed")
    assert type_returned_data("abc ", descriptor) == " cba"


def test_class_descriptor_builds_target():
    """Mappings are passed as keyword arguments"""
    assert type_returned_data('{"x": 1, "y": 2}', ClassDescriptor(target=Point)) == Point(1, 2)


def test_class_descriptor_wraps_constructor_errors():
    """Constructor failures surface as TypeMismatch"""
    with pytest.raises(TypeMismatch):
        type_returned_data('{"z": 1}', ClassDescriptor(target=Point))


def test_union_is_order_sensitive():
    """The first alternative that accepts the text wins"""
    assert type_returned_data("42", UnionDescriptor(any_of=["integer", "string"])) == 42
    assert type_returned_data("42", UnionDescriptor(any_of=["string", "integer"])) == "42"


def test_union_string_before_array_takes_the_text():
    """Declared order wins even when a later alternative fits better"""
    descriptor = UnionDescriptor(any_of=["null", "string", ArrayDescriptor(items="integer")])
    assert type_returned_data("[1,2,3]", descriptor) == "[1,2,3]"
    assert type_returned_data("null", descriptor) is None

    reordered = UnionDescriptor(any_of=["null", ArrayDescriptor(items="integer"), "string"])
    assert type_returned_data("[1,2,3]", reordered) == [1, 2, 3]


def test_union_aggregates_failures():
    """Every alternative's error is reported"""
    with pytest.raises(AggregateUnionFailure) as exc_info:
        type_returned_data("abc", UnionDescriptor(any_of=["integer", "boolean"]))

    error = exc_info.value
    assert len(error.errors) == 2
    assert str(error).startswith("Cannot convert value. Tried 2 options.")
    assert isinstance(error, TypeError)
    assert error.to_dict()["errors"] == error.errors


# ---------------------------------------------------------------------------
# Descriptor construction
# ---------------------------------------------------------------------------

def test_as_descriptor_accepts_plain_dicts():
    """Dicts in descriptor shape are validated into models"""
    descriptor = as_descriptor({"kind": "array", "items": {"kind": "enum", "values": ["a", "b"]}})
    assert isinstance(descriptor, ArrayDescriptor)
    assert descriptor.items == EnumDescriptor(values=["a", "b"])

    union = as_descriptor({"kind": "union", "anyOf": ["null", "integer"]})
    assert union.any_of == ["null", "integer"]


def test_as_descriptor_rejects_unknown_primitives():
    """Unknown tags are reported"""
    with pytest.raises(ValueError):
        as_descriptor("float")


def test_descriptors_are_frozen():
    """Descriptors are immutable values"""
    descriptor = ArrayDescriptor(items="string")
    with pytest.raises(ValidationError):
        descriptor.items = "integer"


@pytest.mark.parametrize("annotation, expected", [
    (int, "integer"),
    (float, "number"),
    (str, "string"),
    (bool, "boolean"),
    (type(None), "null"),
    (List[int], ArrayDescriptor(items="integer")),
    (Dict[str, float], DictDescriptor(value="number")),
    (Tuple[int, ...], TupleDescriptor(items=[], rest="integer")),
    (Tuple[str, int], TupleDescriptor(items=["string", "integer"])),
    (Literal["a", "b"], EnumDescriptor(values=["a", "b"])),
    (Literal["only"], LiteralDescriptor(value="only")),
])
def test_descriptor_from_annotation(annotation, expected):
    """Python hints map to descriptors"""
    assert descriptor_from_annotation(annotation) == expected


def test_optional_lists_null_first():
    """None is tried before the other alternative"""
    descriptor = descriptor_from_annotation(Optional[str])
    assert descriptor == UnionDescriptor(any_of=["null", "string"])
    assert type_returned_data("None", descriptor) is None
    assert type_returned_data("text", descriptor) == "text"


def test_enum_annotation_returns_members():
    """Enum classes coerce back to their members"""
    descriptor = descriptor_from_annotation(Color)
    assert type_returned_data('"red"', descriptor) is Color.RED
    assert type_returned_data("Color.GREEN", descriptor) is Color.GREEN
    with pytest.raises(TypeMismatch):
        type_returned_data("blue", descriptor)


def test_pydantic_annotation_validates():
    """Pydantic models are built with model_validate"""
    descriptor = descriptor_from_annotation(Person)
    person = type_returned_data('{"name": "Ada", "age": "36"}', descriptor)
    assert person == Person(name="Ada", age=36)


def test_typeddict_annotation_becomes_object():
    """TypedDict fields become object properties"""
    descriptor = descriptor_from_annotation(Movie)
    assert isinstance(descriptor, ObjectDescriptor)
    assert descriptor.properties == {"title": "string", "year": "integer"}
    assert type_returned_data('{"title": "Heat", "year": 1995, "x": 1}', descriptor) == {
        "title": "Heat",
        "year": 1995,
    }


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

def test_schema_projection():
    """Descriptors project into JSON schema"""
    assert describe_type_as_schema("integer") == {"type": "integer"}
    assert describe_type_as_schema(ArrayDescriptor(items="string")) == {
        "type": "array",
        "items": {"type": "string"},
    }
    assert describe_type_as_schema(UnionDescriptor(any_of=["null", "integer"])) == {
        "anyOf": [{"type": "null"}, {"type": "integer"}]
    }
    assert describe_type_as_schema(LiteralDescriptor(value=3)) == {"const": 3}
    assert describe_type_as_schema(
        ObjectDescriptor(properties={"a": "number"}, additional_properties=False)
    ) == {"type": "object", "properties": {"a": {"type": "number"}}, "additionalProperties": False}
    assert describe_type_as_schema(TupleDescriptor(items=["string"])) == {
        "type": "array",
        "prefixItems": [{"type": "string"}],
        "items": False,
    }


def test_schema_of_classes_and_custom():
    """Pydantic targets use their own schema, custom types their describe hook"""
    assert describe_type_as_schema(ClassDescriptor(target=Person))["properties"]["age"]["type"] == "integer"
    assert describe_type_as_schema(ClassDescriptor(target=Point)) == {"type": "object", "title": "Point"}
    assert describe_type_as_schema(CustomDescriptor(parse=str)) == {"description": "custom type"}
    described = CustomDescriptor(parse=str, describe=lambda: {"type": "string", "format": "date"})
    assert describe_type_as_schema(described) == {"type": "string", "format": "date"}


def test_nice_type_names():
    """Readable names for every kind"""
    assert nice_type_name("string") == "string"
    assert nice_type_name(ArrayDescriptor(items="string")) == "Array<string>"
    assert nice_type_name(TupleDescriptor(items=["string", "integer"])) == "[string, integer]"
    assert nice_type_name(DictDescriptor(value="number")) == "{ [key: string]: number }"
    assert nice_type_name(ObjectDescriptor(properties={"a": "number", "b": "string"})) == "{ a: number; b: string }"
    assert nice_type_name(EnumDescriptor(values=["a", "b"])) == "Enum<a|b>"
    assert nice_type_name(UnionDescriptor(any_of=["integer", "string"])) == "integer | string"
    assert nice_type_name(LiteralDescriptor(value="x")) == '"x"'
    assert nice_type_name(ClassDescriptor(target=Point)) == "Point"
    assert nice_type_name(CustomDescriptor(parse=str, name="Date")) == "Date"


def test_python_projection():
    """Python definitions for prompts"""
    assert describe_type_as_python("integer") == ""
    assert describe_type_as_python(None) == ""
    assert describe_type_as_python(ObjectDescriptor(properties={"a": "integer"}), "Point") == (
        "class Point(TypedDict, total=False):\n    a: int"
    )
    assert describe_type_as_python(ArrayDescriptor(items="string"), "Names") == "Names = List[str]"
    assert describe_type_as_python(EnumDescriptor(values=["a", "b"]), "Choice") == "Choice = Literal['a', 'b']"


def test_python_annotations():
    """One-line annotations"""
    assert python_type_annotation("integer") == "int"
    assert python_type_annotation(UnionDescriptor(any_of=["null", "integer"])) == "Optional[int]"
    assert python_type_annotation(DictDescriptor(value=ArrayDescriptor(items="boolean"))) == "Dict[str, List[bool]]"
    assert python_type_annotation(ClassDescriptor(target=Point)) == "Point"


def test_stringify_value():
    """Bound values render as Python literals"""
    assert stringify_value(2) == "2"
    assert stringify_value("hi") == "'hi'"
    assert stringify_value(None) == "None"
    assert stringify_value(Color.RED) == "Color.RED"
    assert stringify_value(b"abc") == "<binary data: 3 bytes>"
    assert stringify_value(Person(name="Ada", age=36)) == "{'name': 'Ada', 'age': 36}"
