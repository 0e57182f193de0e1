"""
Base model interface used by the pipelines
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, TypedDict, TYPE_CHECKING

if TYPE_CHECKING:
    from hosta.core.inspection import HostaInspection


class ImageUrl(TypedDict):
    url: str


class MessageContent(TypedDict, total=False):
    """One part of a chat message: ``{"type": "text", "text": ...}`` or an image_url part"""
    type: str
    text: str
    image_url: ImageUrl


class Message(TypedDict):
    role: str
    content: Any


ModelResponse = Dict[str, Any]


class ModelCapabilities(str, Enum):
    """What a model accepts and produces"""
    TEXT2TEXT = "TEXT2TEXT"
    TEXT2JSON = "TEXT2JSON"
    TEXT2IMAGE = "TEXT2IMAGE"
    IMAGE2TEXT = "IMAGE2TEXT"
    IMAGE2IMAGE = "IMAGE2IMAGE"
    THINK = "THINK"
    JSON_OUTPUT = "JSON_OUTPUT"


DEFAULT_REASONING_TAGS: Tuple[str, str] = ("<think>", "</think>")


class Model(ABC):
    """
    A language model reachable through some API

    Subclasses implement the transport (api_call) and know how to read their
    provider's response shape (get_response_content).
    """

    def __init__(
        self,
        capabilities: Optional[Set[ModelCapabilities]] = None,
        api_parameters: Optional[Dict[str, Any]] = None,
        additional_headers: Optional[Dict[str, str]] = None,
        preferred_image_format: str = "png",
        max_async_calls: int = 7,
    ):
        self.capabilities: Set[ModelCapabilities] = set(capabilities or {ModelCapabilities.TEXT2TEXT})
        self.api_parameters: Dict[str, Any] = dict(api_parameters or {})
        self.additional_headers: Dict[str, str] = dict(additional_headers or {})
        self.preferred_image_format = preferred_image_format
        self.max_async_calls = max_async_calls
        self._used_tokens = 0
        self._nb_requests = 0

    @abstractmethod
    async def api_call(self, messages: List[Message], llm_args: Optional[Dict[str, Any]] = None) -> ModelResponse:
        """Send messages to the model and return the raw provider response"""
        pass

    @abstractmethod
    def get_response_content(self, response: ModelResponse) -> str:
        """Extract the generated text from a raw provider response"""
        pass

    def get_thinking_and_data_sections(
        self,
        response: str,
        reasoning_tags: Tuple[str, str] = DEFAULT_REASONING_TAGS,
    ) -> Tuple[str, str]:
        """
        Split a response into its reasoning and answer sections

        Args:
            response: Generated text
            reasoning_tags: Start and end delimiters of the reasoning section

        Returns:
            (thinking, answer); thinking is empty when no complete tag pair is found
        """
        start_tag, end_tag = reasoning_tags
        start = response.find(start_tag)
        end = response.find(end_tag)

        if start != -1 and end != -1 and end > start:
            thinking = response[start + len(start_tag):end].strip()
            answer = response[end + len(end_tag):].strip()
            return thinking, answer

        return "", response.strip()

    def print_last_prompt(self, inspection: "HostaInspection") -> None:
        """Print the messages sent for the last call of an inspection"""
        messages = inspection.logs.get("llm_api_messages_sent")
        if not messages:
            print("No prompt found for this function.")
            return
        for message in messages:
            print(f"[{message['role'].upper()} PROMPT]")
            content = message["content"]
            if isinstance(content, str):
                print(content)
                continue
            for part in content:
                if part.get("type") == "text":
                    print(part.get("text", ""))
                elif part.get("type") == "image_url":
                    url = part.get("image_url", {}).get("url", "")
                    print(f"<image: {url[:40]}...>")

    @property
    def used_tokens(self) -> int:
        return self._used_tokens

    @property
    def nb_requests(self) -> int:
        return self._nb_requests
