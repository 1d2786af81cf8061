"""Test doubles shared across test modules"""
from typing import List

from metrics.exporters.base import BaseWriteClient, WriteError
from metrics.models import Batch


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnsupportedInstrument:
    """Instrument kind the exporter does not know"""

    kind = "sample_set"


class RecordingWriteClient(BaseWriteClient):
    """Write client that keeps every batch it is given"""

    def __init__(self, fail_with: Exception = None):
        self.batches: List[Batch] = []
        self.fail_with = fail_with
        self.closed = False

    def write(self, batch: Batch) -> None:
        self.batches.append(batch)
        if self.fail_with is not None:
            raise self.fail_with

    def close(self) -> None:
        self.closed = True


def failing_client(message: str = "connection refused") -> RecordingWriteClient:
    return RecordingWriteClient(fail_with=WriteError(message))
