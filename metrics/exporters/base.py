"""Base write client interface and factory"""
import abc
from config import Config
from metrics.models import Batch


class ExporterSetupError(Exception):
    """Write client could not be created; export must not start"""


class WriteError(Exception):
    """A batch could not be delivered to the store"""


class BaseWriteClient(abc.ABC):
    """Abstract base class for time-series store write clients"""

    @abc.abstractmethod
    def write(self, batch: Batch) -> None:
        """Deliver batch, raising WriteError on failure"""
        pass

    def close(self) -> None:
        """Release connections held by the client"""
        pass


class WriteClientFactory:
    """Factory for creating write clients from configuration"""

    @staticmethod
    def create_write_client(config: Config) -> BaseWriteClient:
        """Create the InfluxDB write client described by config"""
        from .influxdb import InfluxDBWriteClient
        return InfluxDBWriteClient(
            host_url=config.influxdb_host,
            username=config.influxdb_username,
            password=config.influxdb_password,
            timeout=config.write_timeout
        )
