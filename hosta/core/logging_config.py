"""
Unified logging configuration with structured JSON logging, context support and secret masking
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from hosta.core.config import get_settings

ROOT_LOGGER_NAME = "hosta"

# Context variables attached to every JSON record (e.g. function_name)
log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname", "levelno",
    "lineno", "module", "msecs", "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
}


class SensitiveDataFilter(logging.Filter):
    """Filter to mask API keys and tokens in log messages"""

    SENSITIVE_PATTERNS = [
        (r'api[_-]?key["\']?\s*[:=]\s*["\']?([^"\'\s&,}]+)', r'api_key": "***"'),
        (r'token["\']?\s*[:=]\s*["\']?([^"\'\s&,}]+)', r'token": "***"'),
        (r'Bearer\s+([^\s"\']+)', r'Bearer ***'),
        (r'Authorization:\s*([^\s"]+)', r'Authorization: ***'),
        (r'\bsk-[A-Za-z0-9_\-]{8,}', r'sk-***'),
    ]

    def __init__(self, enabled: bool = True):
        super().__init__()
        self.enabled = enabled

    def _mask(self, text: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and mask sensitive data"""
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class ContextualFormatter(logging.Formatter):
    """JSON formatter with context support"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_dict = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        ctx = log_context.get({})
        if ctx:
            log_dict.update(ctx)

        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)

        # Fields passed through extra=
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or key in log_dict:
                continue
            try:
                json.dumps(value)
                log_dict[key] = value
            except (TypeError, ValueError):
                log_dict[key] = str(value)

        return json.dumps(log_dict, ensure_ascii=False, default=str)


class LoggingConfig:
    """
    Centralized logging configuration for the hosta logger tree

    Only the "hosta" logger is touched: host applications keep control of the root logger.
    """

    _configured = False
    _module_levels: Dict[str, str] = {}

    @classmethod
    def configure(cls, module_levels: Optional[Dict[str, str]] = None, force: bool = False):
        """Configure logging for the library"""
        if cls._configured and not force:
            return

        settings = get_settings()

        levels = {ROOT_LOGGER_NAME: settings.log_level}
        if settings.log_module_levels:
            try:
                levels.update(json.loads(settings.log_module_levels))
            except (json.JSONDecodeError, TypeError):
                pass
        if module_levels:
            levels.update(module_levels)
        cls._module_levels = levels

        if settings.log_format.lower() == "json":
            formatter: logging.Formatter = ContextualFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler.addFilter(SensitiveDataFilter(enabled=not settings.log_sensitive_data))

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers = [handler]
        root.propagate = False

        for module, level in levels.items():
            logging.getLogger(module).setLevel(getattr(logging, level.upper(), logging.WARNING))

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for a module"""
        if not cls._configured:
            cls.configure()
        return logging.getLogger(name)

    @classmethod
    def set_module_level(cls, module: str, level: str):
        """Set logging level for a specific module"""
        logging.getLogger(module).setLevel(getattr(logging, level.upper()))
        cls._module_levels[module] = level

    @classmethod
    def get_module_level(cls, module: str) -> str:
        """Get logging level for a specific module"""
        return logging.getLevelName(logging.getLogger(module).level)

    @classmethod
    def set_context(cls, **kwargs):
        """Set context variables for logging"""
        ctx = log_context.get({}).copy()
        ctx.update(kwargs)
        log_context.set(ctx)

    @classmethod
    def clear_context(cls):
        """Clear context variables"""
        log_context.set({})
