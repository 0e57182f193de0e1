from hosta.models.base_model import Message, MessageContent, Model, ModelCapabilities, ModelResponse
from hosta.models.openai_compatible import OpenAICompatibleModel

__all__ = [
    "Message",
    "MessageContent",
    "Model",
    "ModelCapabilities",
    "ModelResponse",
    "OpenAICompatibleModel",
]
