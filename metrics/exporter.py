"""Periodic InfluxDB exporter: sample the registry, build a batch, write it"""
import time
from typing import Optional
from .models import Batch
from .registry import Registry
from .transformer import MetricTransformer
from .exporters.base import BaseWriteClient
from logging_config import get_logger, log_export_cycle, log_error

logger = get_logger(__name__)


class InfluxExporter:
    """Runs export cycles against one registry and one write client"""

    def __init__(self, registry: Registry, client: BaseWriteClient, database: str,
                 transformer: Optional[MetricTransformer] = None):
        self.registry = registry
        self.client = client
        self.database = database
        self.transformer = transformer or MetricTransformer()

        # Bookkeeping for the status surface only
        self.cycle_count = 0
        self.failed_writes = 0
        self.last_export_time = 0.0
        self.last_batch_size = 0

    def build_batch(self) -> Batch:
        """Sample every instrument into a fresh batch"""
        points = self.transformer.transform_registry(self.registry)
        return Batch(database=self.database, points=points)

    def send(self) -> Batch:
        """Run one export cycle; delivery failures are logged, never raised"""
        start_time = time.time()
        self.cycle_count += 1

        batch = self.build_batch()
        delivered = True
        try:
            self.client.write(batch)
        except Exception as e:
            delivered = False
            self.failed_writes += 1
            log_error(logger, e, {
                "component": "influx_exporter",
                "database": batch.database,
                "points_count": len(batch.points),
                "failed_writes": self.failed_writes
            })

        self.last_export_time = time.time()
        self.last_batch_size = len(batch.points)
        log_export_cycle(logger, len(batch.points), self.last_export_time - start_time, delivered)
        return batch
