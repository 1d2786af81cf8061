"""InfluxDB 1.x write client"""
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
import requests
from influxdb import InfluxDBClient
from influxdb.exceptions import InfluxDBClientError, InfluxDBServerError
from metrics.models import Batch
from logging_config import get_logger
from .base import BaseWriteClient, ExporterSetupError, WriteError

logger = get_logger(__name__)

DEFAULT_PORTS = {"http": 8086, "https": 8086}


class InfluxDBWriteClient(BaseWriteClient):
    """Writes batches to InfluxDB over its HTTP API"""

    def __init__(self, host_url: str, username: str = "", password: str = "",
                 timeout: Optional[float] = None, client: Optional[InfluxDBClient] = None):
        self.host_url = host_url
        self._client = client or self._create_client(host_url, username, password, timeout)

    @staticmethod
    def _create_client(host_url: str, username: str, password: str, timeout: Optional[float]) -> InfluxDBClient:
        """Build the underlying client, failing fast on an unusable endpoint"""
        try:
            parsed = urlparse(host_url)
            port = parsed.port
        except ValueError as e:
            raise ExporterSetupError(f"Invalid InfluxDB URL {host_url!r}: {e}") from e

        if parsed.scheme not in DEFAULT_PORTS or not parsed.hostname:
            raise ExporterSetupError(f"Invalid InfluxDB URL {host_url!r}: expected http(s)://host[:port]")

        try:
            client = InfluxDBClient(
                host=parsed.hostname,
                port=port or DEFAULT_PORTS[parsed.scheme],
                username=username or None,
                password=password or None,
                ssl=parsed.scheme == "https",
                verify_ssl=parsed.scheme == "https",
                timeout=timeout,
                # A single attempt per batch, failed batches are dropped
                retries=1,
                path=parsed.path.rstrip("/")
            )
        except Exception as e:
            raise ExporterSetupError(f"Failed to create InfluxDB client: {e}") from e

        logger.info("InfluxDB client created", host=parsed.hostname, port=port or DEFAULT_PORTS[parsed.scheme])
        return client

    def write(self, batch: Batch) -> None:
        """Write batch with its database and precision"""
        if not batch.points:
            logger.debug("Empty batch, nothing to write", database=batch.database)
            return

        try:
            self._client.write_points(
                self._to_influx_points(batch),
                time_precision=batch.precision,
                database=batch.database
            )
        except (InfluxDBClientError, InfluxDBServerError, requests.exceptions.RequestException) as e:
            raise WriteError(f"Failed to write {len(batch.points)} points to {batch.database}: {e}") from e

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _to_influx_points(batch: Batch) -> List[Dict[str, Any]]:
        return [
            {
                "measurement": point.name,
                "time": point.timestamp_ms,
                "fields": dict(point.fields),
            }
            for point in batch.points
        ]
