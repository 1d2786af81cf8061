"""Translate registry instruments into InfluxDB measurement points"""
import time
from typing import Any, Callable, Dict, List, Optional
from .models import FieldValue, InstrumentKind, MeasurementPoint
from .instruments import HistogramSnapshot, MeterSnapshot
from .registry import Registry
from logging_config import get_logger

logger = get_logger(__name__)

PERCENTILE_RANKS = (0.5, 0.75, 0.95, 0.99, 0.999)
PERCENTILE_FIELDS = (
    "50-percentile",
    "75-percentile",
    "95-percentile",
    "99-percentile",
    "999-percentile",
)

NAME_SUFFIXES = {
    InstrumentKind.COUNTER: "count",
    InstrumentKind.GAUGE: "value",
    InstrumentKind.GAUGE_FLOAT: "value",
    InstrumentKind.HISTOGRAM: "histogram",
    InstrumentKind.METER: "meter",
    InstrumentKind.TIMER: "timer",
}


class MetricTransformer:
    """Converts instruments to measurement points by kind"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._field_builders: Dict[InstrumentKind, Callable[[Any, float], Dict[str, FieldValue]]] = {
            InstrumentKind.COUNTER: self._counter_fields,
            InstrumentKind.GAUGE: self._gauge_fields,
            InstrumentKind.GAUGE_FLOAT: self._gauge_float_fields,
            InstrumentKind.HISTOGRAM: self._histogram_fields,
            InstrumentKind.METER: self._meter_fields,
            InstrumentKind.TIMER: self._timer_fields,
        }

    def transform(self, name: str, instrument: Any) -> Optional[MeasurementPoint]:
        """Sample one instrument, or return None if its kind is unsupported"""
        kind = getattr(instrument, "kind", None)
        build_fields = self._field_builders.get(kind) if isinstance(kind, InstrumentKind) else None
        if build_fields is None:
            logger.debug("Skipping unsupported instrument", metric=name, instrument_type=type(instrument).__name__)
            return None

        now = self._clock()
        return MeasurementPoint(
            name=f"{name}.{NAME_SUFFIXES[kind]}",
            timestamp=now,
            fields=build_fields(instrument, now)
        )

    def transform_registry(self, registry: Registry) -> List[MeasurementPoint]:
        """Sample every supported instrument in registry enumeration order"""
        points = []

        def visit(name: str, instrument: Any) -> None:
            point = self.transform(name, instrument)
            if point is not None:
                points.append(point)

        registry.each(visit)
        return points

    def _counter_fields(self, counter, now: float) -> Dict[str, FieldValue]:
        return {
            "count": int(counter.count()),
            "time": int(now * 1000),
        }

    def _gauge_fields(self, gauge, now: float) -> Dict[str, FieldValue]:
        return {"value": int(gauge.value())}

    def _gauge_float_fields(self, gauge, now: float) -> Dict[str, FieldValue]:
        return {"value": float(gauge.value())}

    def _histogram_fields(self, histogram, now: float) -> Dict[str, FieldValue]:
        return _distribution_fields(histogram.snapshot())

    def _meter_fields(self, meter, now: float) -> Dict[str, FieldValue]:
        snapshot: MeterSnapshot = meter.snapshot()
        return {
            "count": int(snapshot.count),
            "one-minute": float(snapshot.rate1),
            "five-minute": float(snapshot.rate5),
            "fifteen-minute": float(snapshot.rate15),
            "mean": float(snapshot.rate_mean),
        }

    def _timer_fields(self, timer, now: float) -> Dict[str, FieldValue]:
        snapshot = timer.snapshot()
        fields = _distribution_fields(snapshot.histogram)
        fields.update({
            "one-minute": float(snapshot.meter.rate1),
            "five-minute": float(snapshot.meter.rate5),
            "fifteen-minute": float(snapshot.meter.rate15),
            "mean-rate": float(snapshot.meter.rate_mean),
        })
        return fields


def _distribution_fields(snapshot: HistogramSnapshot) -> Dict[str, FieldValue]:
    """Fields shared by histograms and timers, all from one snapshot"""
    fields: Dict[str, FieldValue] = {
        "count": int(snapshot.count),
        "min": float(snapshot.min),
        "max": float(snapshot.max),
        "mean": float(snapshot.mean),
        "std-dev": float(snapshot.std_dev),
    }
    for label, value in zip(PERCENTILE_FIELDS, snapshot.percentiles(PERCENTILE_RANKS)):
        fields[label] = float(value)
    return fields
