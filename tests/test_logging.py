"""
Tests for logging configuration
"""
import json
import logging

from hosta.core.logging_config import (
    ROOT_LOGGER_NAME,
    ContextualFormatter,
    LoggingConfig,
    SensitiveDataFilter,
)
from hosta.utils.errors import RequestFailed


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("hosta.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_sensitive_data_is_masked():
    """API keys and bearer tokens never reach the output"""
    record = make_record('sending {"api_key": "sk-secret-value-123"} with Bearer abc.def')
    SensitiveDataFilter().filter(record)

    assert "sk-secret-value-123" not in record.msg
    assert "abc.def" not in record.msg
    assert "Bearer ***" in record.msg


def test_masking_can_be_disabled():
    """log_sensitive_data keeps messages intact"""
    record = make_record("token=abc")
    SensitiveDataFilter(enabled=False).filter(record)
    assert record.msg == "token=abc"


def test_json_formatter_includes_context_and_extra():
    """Context variables and extra fields are part of the JSON record"""
    LoggingConfig.set_context(function_name="add")
    try:
        output = ContextualFormatter().format(make_record("hello", arg_count=2))
    finally:
        LoggingConfig.clear_context()

    data = json.loads(output)
    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert data["function_name"] == "add"
    assert data["arg_count"] == 2


def test_only_the_library_logger_is_configured():
    """The root logger is left to the host application"""
    root_handlers = list(logging.getLogger().handlers)
    LoggingConfig.configure(force=True)

    library_logger = logging.getLogger(ROOT_LOGGER_NAME)
    assert library_logger.propagate is False
    assert len(library_logger.handlers) == 1
    assert logging.getLogger().handlers == root_handlers


def test_module_levels():
    """Levels can be set per module"""
    LoggingConfig.set_module_level("hosta.pipelines", "DEBUG")
    assert LoggingConfig.get_module_level("hosta.pipelines") == "DEBUG"
    LoggingConfig.configure(module_levels={"hosta.pipelines": "WARNING"}, force=True)
    assert LoggingConfig.get_module_level("hosta.pipelines") == "WARNING"


def test_errors_serialize_for_logs():
    """Errors expose a structured form"""
    error = RequestFailed("boom", status_code=500, metadata={"model": "m"})
    assert error.to_dict() == {
        "error_type": "RequestFailed",
        "message": "boom",
        "metadata": {"model": "m"},
        "status_code": 500,
    }
