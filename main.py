#!/usr/bin/env python3
"""Main entry point for the InfluxDB metrics exporter"""
import asyncio
import sys
from typing import Optional
import uvicorn
from config import Config
from app.server import ExporterServer
from metrics.exporter import InfluxExporter
from metrics.exporters.base import WriteClientFactory
from metrics.registry import Registry, default_registry
from metrics.scheduler import ExportScheduler
from logging_config import setup_structured_logging, get_logger, log_exporter_startup, log_error


def run_exporter(registry: Registry, interval: float, config: Config,
                 stop: Optional[asyncio.Event] = None, max_cycles: Optional[int] = None) -> int:
    """Export registry to InfluxDB every interval seconds

    Blocks until stop is set or max_cycles have run; without either it runs
    for the life of the process. Raises ExporterSetupError before the first
    tick if the write client cannot be created.
    """
    client = WriteClientFactory.create_write_client(config)
    exporter = InfluxExporter(registry, client, config.influxdb_database)
    scheduler = ExportScheduler(interval, exporter.send)
    try:
        return asyncio.run(scheduler.run(stop=stop, max_cycles=max_cycles))
    finally:
        scheduler.shutdown()
        client.close()


def main():
    """Main application entry point"""
    try:
        config = Config()

        setup_structured_logging(config)
        logger = get_logger(__name__)

        log_exporter_startup(logger, config)

        if not config.status_enabled:
            run_exporter(default_registry, config.export_interval, config)
            return

        client = WriteClientFactory.create_write_client(config)
        server = ExporterServer(config, default_registry, client)

        uvicorn.run(
            server.get_app(),
            host=config.status_host,
            port=config.status_port,
            log_config=None  # We handle logging ourselves
        )

    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger = get_logger(__name__)
        log_error(logger, e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()
