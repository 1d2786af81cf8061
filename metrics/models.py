"""Measurement point and batch models for InfluxDB export"""
from dataclasses import dataclass, field
from typing import Dict, List, Union
from enum import Enum

PRECISION_MILLISECONDS = "ms"

FieldValue = Union[int, float]


class InstrumentKind(Enum):
    """Supported metric instrument kinds"""
    COUNTER = "counter"
    GAUGE = "gauge"
    GAUGE_FLOAT = "gauge_float"
    HISTOGRAM = "histogram"
    METER = "meter"
    TIMER = "timer"


@dataclass
class MeasurementPoint:
    """Single point sampled from one instrument"""
    name: str
    timestamp: float
    fields: Dict[str, FieldValue]

    @property
    def timestamp_ms(self) -> int:
        """Sampling instant in epoch milliseconds"""
        return int(self.timestamp * 1000)


@dataclass
class Batch:
    """Points written to the store in one export cycle"""
    database: str
    points: List[MeasurementPoint] = field(default_factory=list)
    precision: str = PRECISION_MILLISECONDS

    def __len__(self) -> int:
        return len(self.points)
