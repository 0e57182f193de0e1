"""
Per-callable inspection state

An inspection is created the first time a callable is emulated and is then
reused, and mutated, by every later call against the same callable. The
registry holds callables weakly so inspections disappear with their function.
"""
import threading
import weakref
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional, TYPE_CHECKING

from hosta.core.analyzer import HostaAnalysis, SignatureLike, hosta_analyze, hosta_analyze_update
from hosta.core.logging_config import LoggingConfig
from hosta.core.type_converter import TypeDescriptor, as_descriptor
from hosta.utils.errors import FrameError

if TYPE_CHECKING:
    from hosta.models.base_model import Model
    from hosta.pipelines.simple_pipeline import Pipeline

logger = LoggingConfig.get_logger(__name__)


def _reference(fn: Optional[Callable]) -> Callable[[], Optional[Callable]]:
    """Weak reference to fn when possible so registry values never keep their key alive"""
    if fn is None:
        return lambda: None
    try:
        return weakref.ref(fn)
    except TypeError:
        return lambda: fn


class HostaInspection:
    """Analysis of a callable plus everything recorded while emulating it"""

    def __init__(
        self,
        function: Optional[Callable],
        analysis: HostaAnalysis,
        logs: Optional[Dict[str, Any]] = None,
        counters: Optional[Dict[str, int]] = None,
        prompt_data: Optional[Dict[str, Any]] = None,
        model: Optional["Model"] = None,
        pipeline: Optional["Pipeline"] = None,
    ):
        self._function_ref = _reference(function)
        self.analysis = analysis
        self.logs: Dict[str, Any] = logs if logs is not None else {}
        self.counters: Dict[str, int] = counters if counters is not None else {}
        self.prompt_data: Dict[str, Any] = prompt_data if prompt_data is not None else {}
        self.model = model
        self.pipeline = pipeline

    @property
    def function(self) -> Optional[Callable]:
        return self._function_ref()

    def __repr__(self) -> str:
        return f"HostaInspection(function={self.analysis.name!r}, logs={sorted(self.logs)})"


def _apply_overrides(
    analysis: HostaAnalysis,
    doc: Optional[str],
    name: Optional[str],
    return_type: Optional[TypeDescriptor],
) -> HostaAnalysis:
    if doc is not None:
        analysis.doc = doc
    if name is not None:
        analysis.name = name
    if return_type is not None:
        analysis.type = as_descriptor(return_type)
    return analysis


class InspectionRegistry:
    """
    Maps callables to their inspection

    Callables that cannot be weakly referenced (some builtins) are held strongly.
    """

    def __init__(self):
        self._weak: "weakref.WeakKeyDictionary[Callable, HostaInspection]" = weakref.WeakKeyDictionary()
        self._strong: Dict[int, HostaInspection] = {}
        self._lock = threading.RLock()

    def _store(self, fn: Callable) -> MutableMapping:
        try:
            weakref.ref(fn)
        except TypeError:
            return self._strong
        return self._weak

    @staticmethod
    def _key(store: MutableMapping, fn: Callable) -> Any:
        return fn if isinstance(store, weakref.WeakKeyDictionary) else id(fn)

    def get(self, fn: Callable) -> Optional[HostaInspection]:
        """Last inspection recorded for a callable, if any"""
        with self._lock:
            store = self._store(fn)
            return store.get(self._key(store, fn))

    def get_or_create(
        self,
        fn: Callable,
        args: Optional[Mapping[str, Any]] = None,
        *,
        doc: Optional[str] = None,
        name: Optional[str] = None,
        return_type: Optional[TypeDescriptor] = None,
        signature_override: Optional[SignatureLike] = None,
    ) -> HostaInspection:
        """
        Inspection for a callable, created on first use and rebound afterwards

        Args:
            fn: Callable being emulated
            args: Call values by parameter name
            doc: Documentation override
            name: Name override
            return_type: Return type override
            signature_override: Explicit signature entries, used on creation only

        Raises:
            FrameError: If fn is not callable
        """
        if not callable(fn):
            raise FrameError(
                "Expected a callable when requesting a Hosta inspection.",
                metadata={"received": type(fn).__name__},
            )

        with self._lock:
            store = self._store(fn)
            key = self._key(store, fn)
            inspection = store.get(key)
            if inspection is None:
                analysis = hosta_analyze(fn, args, signature_override)
                inspection = HostaInspection(
                    function=fn,
                    analysis=_apply_overrides(analysis, doc, name, return_type),
                )
                store[key] = inspection
                logger.debug(f"Created inspection for {inspection.analysis.name}")
            else:
                if args:
                    inspection.analysis = hosta_analyze_update(args, inspection)
                _apply_overrides(inspection.analysis, doc, name, return_type)
            return inspection

    def set(self, fn: Callable, inspection: HostaInspection) -> None:
        with self._lock:
            store = self._store(fn)
            store[self._key(store, fn)] = inspection

    def discard(self, fn: Callable) -> None:
        with self._lock:
            store = self._store(fn)
            store.pop(self._key(store, fn), None)

    def clear(self) -> None:
        with self._lock:
            self._weak.clear()
            self._strong.clear()

    def __contains__(self, fn: Callable) -> bool:
        return self.get(fn) is not None

    def __len__(self) -> int:
        return len(self._weak) + len(self._strong)


default_registry = InspectionRegistry()


def get_hosta_inspection(fn: Callable, args: Optional[Mapping[str, Any]] = None, **overrides: Any) -> HostaInspection:
    """get_or_create on the default registry"""
    return default_registry.get_or_create(fn, args, **overrides)
