"""
Pytest configuration and fixtures
"""
import os

import pytest

# Tests never talk to a real provider
os.environ.setdefault("HOSTA_DEFAULT_MODEL_API_KEY", "sk-test-key-not-used")

from hosta.core.config import reset_default_config
from hosta.core.inspection import InspectionRegistry
from hosta.pipelines.simple_pipeline import OneTurnConversationPipeline
from tests.fakes import ScriptedModel


@pytest.fixture
def scripted_model():
    """Fake model without JSON or thinking capabilities"""
    return ScriptedModel()


@pytest.fixture
def pipeline(scripted_model):
    """Fresh pipeline around the scripted model"""
    return OneTurnConversationPipeline(model_list=[scripted_model])


@pytest.fixture
def registry():
    """Isolated inspection registry"""
    return InspectionRegistry()


@pytest.fixture(autouse=True)
def _isolated_default_config():
    """Every test starts without a process-wide configuration"""
    reset_default_config()
    yield
    reset_default_config()
