"""
Binary argument helpers: turns raw image bytes into data URLs for message attachments
"""
import base64
from typing import Any


def is_binary_like(value: Any) -> bool:
    """Check whether a bound argument value carries raw binary data"""
    return isinstance(value, (bytes, bytearray, memoryview))


def binary_to_data_url(value: Any, image_format: str = "png") -> str:
    """Encode binary data as a base64 data URL"""
    payload = base64.b64encode(bytes(value)).decode("ascii")
    return f"data:image/{image_format};base64,{payload}"
