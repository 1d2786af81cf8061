"""Metric instruments, registry and the periodic InfluxDB exporter"""
from .models import Batch, InstrumentKind, MeasurementPoint
from .instruments import Counter, Gauge, GaugeFloat, Histogram, Meter, Timer
from .registry import MetricsRegistry, default_registry

__all__ = [
    'Batch',
    'InstrumentKind',
    'MeasurementPoint',
    'Counter',
    'Gauge',
    'GaugeFloat',
    'Histogram',
    'Meter',
    'Timer',
    'MetricsRegistry',
    'default_registry'
]
