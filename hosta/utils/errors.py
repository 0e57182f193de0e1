"""
Error taxonomy for hosta

Coercion failures derive from TypeError so callers can catch them either way.
Transport failures belong to the model collaborators and pass through the
pipeline unmodified.
"""
from typing import Any, Dict, List, Optional


class HostaError(Exception):
    """Base class for every error raised by hosta"""

    def __init__(self, message: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "metadata": self.metadata,
        }


class TypeMismatch(HostaError, TypeError):
    """Raw text cannot satisfy a type descriptor"""
    pass


class AggregateUnionFailure(TypeMismatch):
    """Every alternative of a union descriptor failed"""

    def __init__(self, errors: List[str], metadata: Optional[Dict[str, Any]] = None):
        self.errors = list(errors)
        message = (
            f"Cannot convert value. Tried {len(self.errors)} options. "
            + " | ".join(self.errors)
        )
        super().__init__(message, metadata)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class ContractViolation(HostaError):
    """The pipeline was driven in a way its contract forbids (e.g. no model attached)"""
    pass


class FrameError(HostaError):
    """A non-callable was handed to the inspection machinery"""
    pass


class RequestFailed(HostaError):
    """Generic failure of a model API request"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, metadata)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class RateLimited(RequestFailed):
    """The provider rejected the request because of rate limiting"""
    pass


class Unauthorized(RequestFailed):
    """Missing or rejected API credentials"""
    pass
