"""
Free-form prompt to a model, without function emulation
"""
from typing import Any, Dict, List, Optional

from hosta.core.config import HostaConfig, default_config
from hosta.core.logging_config import LoggingConfig
from hosta.models.base_model import Message, MessageContent, Model
from hosta.utils.image import binary_to_data_url, is_binary_like

logger = LoggingConfig.get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


def build_ask_messages(
    user_message: str,
    model: Model,
    system: Optional[str] = DEFAULT_SYSTEM_PROMPT,
    named_args: Optional[Dict[str, Any]] = None,
) -> List[Message]:
    """
    System and user messages for ask()

    Binary named arguments are attached to the user message as images, the
    others are appended to the system message as ``key:`` followed by the value.
    """
    system_text: Optional[str] = system
    user_content: List[MessageContent] = [{"type": "text", "text": user_message}]

    for key, value in (named_args or {}).items():
        if is_binary_like(value):
            user_content.append({
                "type": "image_url",
                "image_url": {"url": binary_to_data_url(value, model.preferred_image_format)},
            })
        else:
            system_text = f"{system_text or ''}\n{key}:\n{value}\n"

    messages: List[Message] = []
    if system_text is not None:
        messages.append({"role": "system", "content": [{"type": "text", "text": system_text}]})
    messages.append({"role": "user", "content": user_content})
    return messages


async def ask(
    user_message: str,
    *,
    system: Optional[str] = DEFAULT_SYSTEM_PROMPT,
    model: Optional[Model] = None,
    config: Optional[HostaConfig] = None,
    force_json_output: bool = False,
    force_llm_args: Optional[Dict[str, Any]] = None,
    **named_args: Any,
) -> str:
    """
    Send a plain prompt and return the generated text

    Args:
        user_message: The prompt
        system: System message; None sends no system message unless named args need one
        model: Model to call (the config's model when omitted)
        config: Configuration used when model is omitted
        force_json_output: Request native JSON output when the model supports it
        force_llm_args: Extra arguments for this model call
        **named_args: Context values; binary values are sent as images

    Returns:
        The text of the model's answer
    """
    model = model or (config or default_config()).model
    messages = build_ask_messages(user_message, model, system, named_args)
    llm_args = {**(force_llm_args or {}), "force_json_output": force_json_output}

    logger.debug("Sending free prompt", extra={"named_args": sorted(named_args)})
    response = await model.api_call(messages, llm_args)
    return model.get_response_content(response)
