"""
Client for OpenAI-compatible chat completion APIs
"""
import json
from typing import Any, Dict, List, Optional, Set

import httpx

from hosta.core.inspection import HostaInspection
from hosta.core.logging_config import LoggingConfig
from hosta.models.base_model import Message, Model, ModelCapabilities, ModelResponse
from hosta.utils.errors import RateLimited, RequestFailed, Unauthorized

logger = LoggingConfig.get_logger(__name__)

DEFAULT_CAPABILITIES = {
    ModelCapabilities.TEXT2TEXT,
    ModelCapabilities.TEXT2JSON,
    ModelCapabilities.IMAGE2TEXT,
    ModelCapabilities.JSON_OUTPUT,
}


def _flatten_content(message: Message) -> Message:
    """A content list holding a single text part becomes a plain string"""
    content = message.get("content")
    if isinstance(content, list) and len(content) == 1 and content[0].get("type") == "text":
        return {**message, "content": content[0].get("text", "")}
    return message


class OpenAICompatibleModel(Model):
    """
    Model served behind a ``/chat/completions`` endpoint (OpenAI, Ollama, vLLM, LM Studio...)

    Args:
        model_name: Model identifier sent in every request
        base_url: API root, e.g. https://api.openai.com/v1
        api_key: Bearer token; required unless require_api_key is False
        api_parameters: Default sampling parameters merged into every request
        additional_headers: Extra HTTP headers
        capabilities: Override of the default capability set
        timeout: Request timeout in seconds
        transport: Custom httpx transport (used by tests)
    """

    def __init__(
        self,
        model_name: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        api_key: Optional[str] = None,
        api_parameters: Optional[Dict[str, Any]] = None,
        additional_headers: Optional[Dict[str, str]] = None,
        capabilities: Optional[Set[ModelCapabilities]] = None,
        timeout: float = 120.0,
        require_api_key: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            capabilities=capabilities or DEFAULT_CAPABILITIES,
            api_parameters=api_parameters,
            additional_headers=additional_headers,
        )
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.require_api_key = require_api_key
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", **self.additional_headers}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_payload(self, messages: List[Message], llm_args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Request body: model, messages, default parameters, then per-call arguments"""
        call_args = dict(llm_args or {})
        force_json_output = call_args.pop("force_json_output", False)

        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [_flatten_content(message) for message in messages],
            **self.api_parameters,
            **call_args,
        }
        # silently ignored when the model cannot honour it
        if force_json_output and ModelCapabilities.JSON_OUTPUT in self.capabilities:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def api_call(self, messages: List[Message], llm_args: Optional[Dict[str, Any]] = None) -> ModelResponse:
        """
        Post messages to the chat completion endpoint

        Raises:
            Unauthorized: Missing API key, or 401/403 from the provider
            RateLimited: 429 from the provider
            RequestFailed: Any other HTTP, transport or decoding failure
        """
        if self.require_api_key and not self.api_key:
            raise Unauthorized(
                "No API key configured. Set HOSTA_DEFAULT_MODEL_API_KEY or pass api_key.",
                metadata={"model": self.model_name, "base_url": self.base_url},
            )

        payload = self.build_payload(messages, llm_args)
        url = f"{self.base_url}/chat/completions"
        logger.info(
            f"Calling {self.model_name} at {url}",
            extra={"model": self.model_name, "message_count": len(messages)},
        )

        self._nb_requests += 1
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request to {url} timed out after {self.timeout}s")
            raise RequestFailed(f"Request to {url} timed out", metadata={"model": self.model_name}) from e
        except httpx.HTTPError as e:
            logger.error(f"Error calling {url}: {e}")
            raise RequestFailed(f"Error calling {url}: {e}", metadata={"model": self.model_name}) from e
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON returned by {url}")
            raise RequestFailed(f"Invalid JSON returned by {url}", metadata={"model": self.model_name}) from e

        usage = data.get("usage") or {}
        self._used_tokens += int(usage.get("total_tokens") or 0)
        return data

    def _status_error(self, response: httpx.Response) -> RequestFailed:
        status = response.status_code
        body = response.text
        metadata = {"model": self.model_name, "base_url": self.base_url}
        logger.error(f"HTTP error from {self.base_url}: {status}", extra={"status_code": status})
        if status == 429:
            return RateLimited(f"Rate limited by {self.base_url}", status_code=status, body=body, metadata=metadata)
        if status in (401, 403):
            return Unauthorized(f"Unauthorized by {self.base_url}", status_code=status, body=body, metadata=metadata)
        return RequestFailed(
            f"HTTP error from {self.base_url}: {status} - {body}",
            status_code=status,
            body=body,
            metadata=metadata,
        )

    def get_response_content(self, response: ModelResponse) -> str:
        """Text of the first choice; content part lists are concatenated"""
        try:
            message = response["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise RequestFailed(
                "Unexpected response shape: no choices[0].message",
                body=json.dumps(response, default=str)[:2000],
            ) from e

        content = message.get("content")
        if content is None:
            return ""
        if isinstance(content, list):
            return "".join(part.get("text", "") for part in content if isinstance(part, dict))
        return str(content)

    def print_last_prompt(self, inspection: HostaInspection) -> None:
        print("\n".join(["Model", "-----------------", f"name={self.model_name}", f"base_url={self.base_url}", ""]))
        super().print_last_prompt(inspection)
