"""Metrics registry holding named instruments for export"""
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol
from logging_config import get_logger


logger = get_logger(__name__)


class DuplicateMetricError(ValueError):
    """Raised when a name is registered twice"""


class Registry(Protocol):
    """Anything the exporter can enumerate instruments from"""

    def each(self, visit: Callable[[str, Any], None]) -> None:
        ...


class MetricsRegistry:
    """Thread-safe, insertion-ordered mapping of metric name to instrument"""

    def __init__(self):
        self._instruments: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, instrument: Any) -> Any:
        """Register a new instrument under name"""
        with self._lock:
            if name in self._instruments:
                raise DuplicateMetricError(f"Metric already registered: {name}")
            self._instruments[name] = instrument
        logger.debug("Registered metric", metric=name, kind=getattr(getattr(instrument, "kind", None), "value", None))
        return instrument

    def get(self, name: str) -> Optional[Any]:
        """Get instrument by name"""
        with self._lock:
            return self._instruments.get(name)

    def get_or_register(self, name: str, factory: Callable[[], Any]) -> Any:
        """Return the instrument under name, creating it with factory if absent"""
        with self._lock:
            instrument = self._instruments.get(name)
            if instrument is None:
                instrument = factory()
                self._instruments[name] = instrument
            return instrument

    def names(self) -> List[str]:
        """List all registered metric names"""
        with self._lock:
            return list(self._instruments.keys())

    def each(self, visit: Callable[[str, Any], None]) -> None:
        """Call visit for every registered instrument

        Iterates over a copy taken under the lock, so visit may touch the
        registry without deadlocking.
        """
        with self._lock:
            items = list(self._instruments.items())
        for name, instrument in items:
            visit(name, instrument)

    def __len__(self) -> int:
        with self._lock:
            return len(self._instruments)


default_registry = MetricsRegistry()
