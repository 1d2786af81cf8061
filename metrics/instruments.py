"""Thread-safe metric instruments and their point-in-time snapshots

Every instrument carries a ``kind`` tag from :class:`InstrumentKind`. The
exporter dispatches on that tag only, so any object exposing ``kind`` and the
matching read methods can be registered, not just the classes defined here.
"""
import math
import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from .models import InstrumentKind

DEFAULT_RESERVOIR_SIZE = 1028
TICK_INTERVAL = 5.0


@dataclass(frozen=True)
class HistogramSnapshot:
    """Immutable copy of a histogram's count and sample reservoir"""
    count: int
    values: Tuple[float, ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[float], count: Optional[int] = None) -> "HistogramSnapshot":
        values = tuple(values)
        return cls(count=len(values) if count is None else count, values=values)

    @property
    def min(self) -> float:
        return float(min(self.values)) if self.values else 0.0

    @property
    def max(self) -> float:
        return float(max(self.values)) if self.values else 0.0

    @property
    def mean(self) -> float:
        if not self.values:
            return 0.0
        return float(sum(self.values)) / len(self.values)

    @property
    def std_dev(self) -> float:
        """Population standard deviation of the sample"""
        if not self.values:
            return 0.0
        mean = self.mean
        variance = sum((v - mean) ** 2 for v in self.values) / len(self.values)
        return math.sqrt(variance)

    def percentiles(self, ranks: Sequence[float]) -> List[float]:
        """Interpolated percentiles for each rank in [0, 1]"""
        if not self.values:
            return [0.0 for _ in ranks]

        ordered = sorted(self.values)
        size = len(ordered)
        result = []
        for rank in ranks:
            pos = rank * (size + 1)
            if pos < 1.0:
                result.append(float(ordered[0]))
            elif pos >= size:
                result.append(float(ordered[-1]))
            else:
                lower = ordered[int(pos) - 1]
                upper = ordered[int(pos)]
                result.append(float(lower + (pos - math.floor(pos)) * (upper - lower)))
        return result


@dataclass(frozen=True)
class MeterSnapshot:
    """Immutable copy of a meter's count and rates (events per second)"""
    count: int
    rate1: float
    rate5: float
    rate15: float
    rate_mean: float


@dataclass(frozen=True)
class TimerSnapshot:
    """Duration histogram and call-rate meter read together"""
    histogram: HistogramSnapshot
    meter: MeterSnapshot

    @property
    def count(self) -> int:
        return self.histogram.count


class Counter:
    """Monotonic-by-convention integer counter"""

    kind = InstrumentKind.COUNTER

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    def count(self) -> int:
        with self._lock:
            return self._count


class Gauge:
    """Integer gauge holding the last value set"""

    kind = InstrumentKind.GAUGE

    def __init__(self, value: int = 0):
        self._value = int(value)
        self._lock = threading.Lock()

    def update(self, value: int) -> None:
        with self._lock:
            self._value = int(value)

    def value(self) -> int:
        with self._lock:
            return self._value


class GaugeFloat:
    """Floating-point gauge holding the last value set"""

    kind = InstrumentKind.GAUGE_FLOAT

    def __init__(self, value: float = 0.0):
        self._value = float(value)
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def value(self) -> float:
        with self._lock:
            return self._value


class Histogram:
    """Histogram backed by a uniform reservoir sample (Vitter's Algorithm R)"""

    kind = InstrumentKind.HISTOGRAM

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE, rng: Optional[random.Random] = None):
        if reservoir_size < 1:
            raise ValueError("reservoir_size must be positive")
        self._size = reservoir_size
        self._rng = rng or random.Random()
        self._values: List[float] = []
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            if len(self._values) < self._size:
                self._values.append(value)
            else:
                index = self._rng.randint(0, self._count - 1)
                if index < self._size:
                    self._values[index] = value

    def clear(self) -> None:
        with self._lock:
            self._values = []
            self._count = 0

    def snapshot(self) -> HistogramSnapshot:
        with self._lock:
            return HistogramSnapshot(count=self._count, values=tuple(self._values))


class EWMA:
    """Exponentially-weighted moving average of a per-second rate

    Not synchronized; the owning meter serializes access.
    """

    def __init__(self, minutes: float, interval: float = TICK_INTERVAL):
        self._alpha = 1.0 - math.exp(-interval / 60.0 / minutes)
        self._interval = interval
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        instant_rate = self._uncounted / self._interval
        self._uncounted = 0
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    @property
    def rate(self) -> float:
        return self._rate


class Meter:
    """Event rate meter with 1, 5 and 15 minute moving averages

    The averages advance in fixed 5 second ticks, caught up lazily whenever
    the meter is marked or read.
    """

    kind = InstrumentKind.METER

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._start = clock()
        self._last_tick = self._start
        self._count = 0
        self._m1 = EWMA(1)
        self._m5 = EWMA(5)
        self._m15 = EWMA(15)
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            for ewma in (self._m1, self._m5, self._m15):
                ewma.update(n)

    def _tick_if_necessary(self) -> None:
        age = self._clock() - self._last_tick
        if age < TICK_INTERVAL:
            return
        ticks = int(age // TICK_INTERVAL)
        self._last_tick += ticks * TICK_INTERVAL
        for _ in range(ticks):
            for ewma in (self._m1, self._m5, self._m15):
                ewma.tick()

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            self._tick_if_necessary()
            elapsed = self._clock() - self._start
            rate_mean = self._count / elapsed if self._count and elapsed > 0 else 0.0
            return MeterSnapshot(
                count=self._count,
                rate1=self._m1.rate,
                rate5=self._m5.rate,
                rate15=self._m15.rate,
                rate_mean=rate_mean
            )


class Timer:
    """Histogram of durations in seconds combined with a call-rate meter"""

    kind = InstrumentKind.TIMER

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._histogram = Histogram(reservoir_size)
        self._meter = Meter(clock)
        self._lock = threading.Lock()

    def update(self, seconds: float) -> None:
        with self._lock:
            self._histogram.update(seconds)
            self._meter.mark()

    @contextmanager
    def time(self):
        """Record the wall time spent inside the block"""
        start = self._clock()
        try:
            yield
        finally:
            self.update(self._clock() - start)

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(histogram=self._histogram.snapshot(), meter=self._meter.snapshot())
