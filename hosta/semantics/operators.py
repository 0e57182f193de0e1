"""
Semantic operators built on closures
"""
from typing import Any, Optional

from hosta.core.config import HostaConfig
from hosta.exec.closure import closure
from hosta.pipelines.simple_pipeline import Pipeline


async def test(
    condition: str = "return False",
    *,
    config: Optional[HostaConfig] = None,
    pipeline: Optional[Pipeline] = None,
    **args: Any,
) -> bool:
    """
    Evaluate a natural language condition against the given values

    Example:
        ``await test("the text is written in French", text=message)``
    """
    check = closure(condition, config=config, pipeline=pipeline, force_return_type="boolean")
    return bool(await check(**args))


# not collected by pytest when imported into a test module
test.__test__ = False
