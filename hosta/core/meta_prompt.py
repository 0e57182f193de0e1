"""
Prompt templates rendered with Jinja2

Templates are dedented when compiled and rendered output has runs of blank
lines collapsed into one, so indentation inside Python source and empty
conditional blocks never leak into the prompt.
"""
from typing import Any, Optional

from jinja2 import Environment, Template

_default_environment = Environment(
    autoescape=False,
    trim_blocks=False,
    lstrip_blocks=False,
    keep_trailing_newline=False,
)


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def dedent(text: str) -> str:
    """Remove the smallest indentation shared by non-blank lines; blank lines become empty"""
    normalized = _normalize_newlines(text)
    lines = normalized.split("\n")

    widths = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    indent = min(widths) if widths else 0
    if indent == 0:
        return normalized

    return "\n".join("" if not line.strip() else line[indent:] for line in lines)


def collapse_empty_lines(text: str) -> str:
    """Keep at most one blank line between two non-blank lines"""
    lines = _normalize_newlines(text).split("\n")
    cleaned = [lines[0]]
    for line in lines[1:]:
        if not line.strip() and not cleaned[-1].strip():
            continue
        cleaned.append(line)
    return "\n".join(cleaned)


class MetaPrompt:
    """
    A Jinja2 template with deterministic whitespace handling

    Args:
        source: Template text; indentation common to all lines is removed
        env: Jinja2 environment used to compile the template
    """

    def __init__(self, source: str, env: Optional[Environment] = None):
        self.env = env or _default_environment
        self._source = dedent(source)
        self._template: Template = self.env.from_string(self._source)

    def copy(self, env: Optional[Environment] = None) -> "MetaPrompt":
        """Independent template with the same source"""
        return MetaPrompt(self._source, env=env or self.env)

    @property
    def source(self) -> str:
        return self._source

    @source.setter
    def source(self, value: str) -> None:
        self._source = dedent(value)
        self._template = self.env.from_string(self._source)

    def render(self, **context: Any) -> str:
        """Render with the given variables; missing variables render as empty"""
        return collapse_empty_lines(self._template.render(**context))

    def __str__(self) -> str:
        return self._source

    def __repr__(self) -> str:
        return "\n".join([
            f"{type(self).__name__} ({type(self.env).__name__})",
            "MetaPrompt source:",
            "--------------------------------",
            self._source,
        ])


EMULATE_META_PROMPT = MetaPrompt("""\
    You will act as a simulator for functions that cannot be implemented in actual code.

    I'll provide you with function definitions described in Python syntax.
    These functions will have no body and may even be impossible to implement in real code,
    so do not attempt to generate the implementation.

    Instead, imagine a realistic or reasonable output that matches the function description.
    I'll ask questions by directly writing out function calls as one would call them in Python.
    Respond with an appropriate return value{% if use_json_mode %} formatted as valid JSON{% endif %}, without adding any extra comments or explanations.
    If the provided information isn't enough to determine a clear answer, respond simply with "None".
    If assumptions need to be made, ensure they stay realistic, align with the provided description.

    {% if allow_thinking %}If unable to determine a clear answer or if assumptions need to be made,
    explain it in between <think></think> tags.{% endif %}

    {% if python_type_definition_dict %}The parameters use the following types:

    {{ python_type_definition_dict }}{% endif %}

    Here's the function definition:

    ```python
    {{ function_return_as_python_type }}

    def {{ function_name }}({{ function_python_args }}) -> {{ function_return_python_annotation }}:
        \"\"\"{{ function_doc }}\"\"\"

        ...
        ...behavior to be simulated...
        ...

        return ...appropriate return value...
    ```

    {% if use_json_mode %}As you return the result in JSON format, here's the schema of the JSON object you should return:
    {{ function_return_as_json_schema }}{% endif %}

    {% if examples_database %}Here are some examples of expected input and output:
    {{ examples_database }}{% endif %}

    {% if chain_of_thought %}To solve the request, you have to follow theses intermediate steps. Give only the final result, don't give the result of theses intermediate steps:
    {{ chain_of_thought }}{% endif %}

    {% if allow_thinking %}
    If you need to think first, place your thought within <think></think> before answering like this:
    <think>
    The user might want ...
    Wait, I have to...
    </think>{% endif %}""")

USER_CALL_META_PROMPT = MetaPrompt("""\
    {% if variables_initialization %}# Values of parameters to be used
    {{ variables_initialization }}

    {% endif %}{{ function_name }}({{ function_call_arguments }})""")
