"""
Push/pull pipelines: turn an inspection into chat messages, then a model response into a typed value
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, Tuple

from hosta.core.analyzer import encode_function
from hosta.core.inspection import HostaInspection
from hosta.core.logging_config import LoggingConfig
from hosta.core.meta_prompt import EMULATE_META_PROMPT, USER_CALL_META_PROMPT, MetaPrompt
from hosta.core.type_converter import type_returned_data
from hosta.models.base_model import Message, MessageContent, Model, ModelCapabilities, ModelResponse
from hosta.utils.errors import ContractViolation
from hosta.utils.image import binary_to_data_url, is_binary_like

logger = LoggingConfig.get_logger(__name__)

FENCE = "```"


def _require_model(inspection: HostaInspection) -> Model:
    if inspection.model is None:
        raise ContractViolation(
            "Pipeline requires a model to be attached to the inspection.",
            metadata={"function_name": inspection.analysis.name},
        )
    return inspection.model


def extract_last_fenced_block(text: str) -> str:
    """
    Keep only the content of the final fenced block when the text ends with a fence

    Text that does not end with a fence, or holds fewer than two fence lines,
    is returned stripped but otherwise unchanged.
    """
    response = text.strip()
    if not response.endswith(FENCE):
        return response
    lines = response.split("\n")
    fences = [index for index, line in enumerate(lines) if line.startswith(FENCE)]
    if len(fences) < 2:
        return response
    start, end = fences[-2], fences[-1]
    return "\n".join(lines[start + 1:end])


class Pipeline(ABC):
    """Sequences prompt construction (push) and response decoding (pull) around one model call"""

    def __init__(self, model_list: List[Model], llm_args: Optional[Dict[str, Any]] = None):
        if not model_list:
            raise ValueError("You shall provide at least one model.")
        self.model_list: List[Model] = list(model_list)
        self.llm_args: Dict[str, Any] = dict(llm_args or {})

    @abstractmethod
    def push(self, inspection: HostaInspection) -> List[Message]:
        pass

    @abstractmethod
    def pull(self, inspection: HostaInspection, response: ModelResponse) -> Any:
        pass

    def print_last_decoding(self, inspection: HostaInspection) -> None:
        """Print what was decoded from the last response"""
        sections = [
            ("rational", "[THINKING]"),
            ("answer", "[ANSWER]"),
            ("response_string", "[RESPONSE STRING]"),
            ("response_data", "[RESPONSE DATA]"),
        ]
        for key, title in sections:
            if key in inspection.logs:
                print(title)
                print(inspection.logs[key])


class OneTurnConversationPipeline(Pipeline):
    """
    One system message describing the function, one user message holding the call

    Args:
        model_list: Candidate models; the first one is used
        emulate_meta_prompt: System template (copied)
        user_call_meta_prompt: User template (copied)
        llm_args: Extra arguments passed to every model call
        use_json_mode: Ask for JSON formatted answers when the model supports it
    """

    def __init__(
        self,
        model_list: List[Model],
        emulate_meta_prompt: Optional[MetaPrompt] = None,
        user_call_meta_prompt: Optional[MetaPrompt] = None,
        llm_args: Optional[Dict[str, Any]] = None,
        use_json_mode: bool = True,
    ):
        super().__init__(model_list, llm_args)
        self.emulate_meta_prompt = (emulate_meta_prompt or EMULATE_META_PROMPT).copy()
        self.user_call_meta_prompt = (user_call_meta_prompt or USER_CALL_META_PROMPT).copy()
        self.use_json_mode = use_json_mode

    # -- push ---------------------------------------------------------------

    def push_detect_missing_types(self, inspection: HostaInspection) -> HostaInspection:
        analysis = inspection.analysis
        if analysis.type is None:
            analysis.type = "string"
        for arg in analysis.args:
            if arg.type is None:
                arg.type = "string"
        return inspection

    def push_choose_model(self, inspection: HostaInspection) -> Model:
        """Routing hook: the default always picks the first model"""
        return self.model_list[0]

    def push_encode_inspected_data(
        self,
        inspection: HostaInspection,
        capabilities: Set[ModelCapabilities],
    ) -> Dict[str, Any]:
        data = encode_function(inspection.analysis, capabilities)
        data["use_json_mode"] = self.use_json_mode and bool(
            {ModelCapabilities.JSON_OUTPUT, ModelCapabilities.TEXT2JSON} & capabilities
        )
        data["allow_thinking"] = ModelCapabilities.THINK in capabilities
        return data

    def push_select_meta_prompts(self, inspection: HostaInspection) -> List[Tuple[str, MetaPrompt, List[str]]]:
        image_format = inspection.model.preferred_image_format if inspection.model else "png"
        images = [
            binary_to_data_url(arg.value, image_format)
            for arg in inspection.analysis.args
            if is_binary_like(arg.value)
        ]
        return [
            ("system", self.emulate_meta_prompt, []),
            ("user", self.user_call_meta_prompt, images),
        ]

    def push(self, inspection: HostaInspection) -> List[Message]:
        """
        Build the messages for one emulated call

        Attaches the chosen model and this pipeline to the inspection and
        records the rendered messages in ``logs["llm_api_messages_sent"]``.
        """
        self.push_detect_missing_types(inspection)
        model = self.push_choose_model(inspection)
        inspection.model = model
        inspection.pipeline = self

        meta_messages = self.push_select_meta_prompts(inspection)
        encoded = self.push_encode_inspected_data(inspection, model.capabilities)
        inspection.prompt_data = encoded

        messages: List[Message] = []
        for role, meta_prompt, images in meta_messages:
            content: List[MessageContent] = [{"type": "text", "text": meta_prompt.render(**encoded)}]
            for url in images:
                content.append({"type": "image_url", "image_url": {"url": url}})
            messages.append({"role": role, "content": content})

        inspection.logs["llm_api_messages_sent"] = messages
        logger.debug(
            f"Pushed {len(messages)} messages for {inspection.analysis.name}",
            extra={"function_name": inspection.analysis.name},
        )
        return messages

    # -- pull ---------------------------------------------------------------

    def pull_extract_messages(self, inspection: HostaInspection, response: ModelResponse) -> str:
        inspection.logs["llm_api_response"] = response
        return _require_model(inspection).get_response_content(response) or ""

    def pull_extract_reasoning(self, inspection: HostaInspection, response: ModelResponse) -> None:
        try:
            reasoning = response["choices"][0]["message"].get("reasoning")
        except (KeyError, IndexError, TypeError, AttributeError):
            return
        if isinstance(reasoning, str):
            inspection.logs["rational"] += reasoning

    def pull_extract_data_section(self, inspection: HostaInspection, raw: str) -> str:
        thinking, answer = _require_model(inspection).get_thinking_and_data_sections(raw)
        inspection.logs["rational"] += thinking
        inspection.logs["answer"] += answer

        cleaned = extract_last_fenced_block(answer)
        inspection.logs["clean_answer"] += cleaned
        return cleaned

    def pull_type_data_section(self, inspection: HostaInspection, response: str) -> Any:
        return type_returned_data(response, inspection.analysis.type or "any")

    def pull(self, inspection: HostaInspection, response: ModelResponse) -> Any:
        """
        Decode a raw provider response into a value of the declared return type

        Raises:
            ContractViolation: If no model is attached to the inspection
            TypeMismatch: If the answer cannot be coerced
        """
        inspection.logs["rational"] = ""
        inspection.logs["answer"] = ""
        inspection.logs["clean_answer"] = ""

        raw = self.pull_extract_messages(inspection, response)
        self.pull_extract_reasoning(inspection, response)

        response_string = self.pull_extract_data_section(inspection, raw)
        inspection.logs["response_string"] = response_string

        response_data = self.pull_type_data_section(inspection, response_string)
        inspection.logs["response_data"] = response_data
        logger.debug(
            f"Pulled response for {inspection.analysis.name}",
            extra={"function_name": inspection.analysis.name, "response_string": response_string},
        )
        return response_data
