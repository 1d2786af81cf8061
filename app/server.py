"""FastAPI status server hosting the export loop"""
import asyncio
import os
import time
from fastapi import FastAPI, HTTPException
from config import Config
from metrics.exporter import InfluxExporter
from metrics.exporters.base import BaseWriteClient
from metrics.registry import MetricsRegistry
from metrics.scheduler import ExportScheduler
from logging_config import get_logger, log_error


logger = get_logger(__name__)


class ExporterServer:
    """FastAPI server running the InfluxDB export loop in the background"""

    def __init__(self, config: Config, registry: MetricsRegistry, client: BaseWriteClient):
        self.config = config
        self.registry = registry
        self.client = client
        self.exporter = InfluxExporter(registry, client, config.influxdb_database)
        self.scheduler = ExportScheduler(config.export_interval, self.exporter.send)
        self.export_task = None
        self.start_time = time.time()

        self.app = FastAPI(
            title="InfluxDB Metrics Exporter",
            version=config.service_version,
            docs_url=None,  # Disable docs for security
            redoc_url=None,  # Disable redoc for security
            openapi_url=None  # Disable OpenAPI schema for security
        )

        self._setup_routes()
        self._setup_events()

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            last_export = self.exporter.last_export_time
            age = time.time() - last_export if last_export > 0 else float('inf')
            is_healthy = age < self.config.export_interval * 2

            health_data = {
                "status": "healthy" if is_healthy else "unhealthy",
                "last_export_seconds_ago": round(age, 1) if age != float('inf') else None,
                "export_interval": self.config.export_interval,
                "total_cycles": self.exporter.cycle_count,
                "failed_writes": self.exporter.failed_writes
            }

            if not is_healthy:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            last_export = self.exporter.last_export_time
            age = time.time() - last_export if last_export > 0 else float('inf')
            cycles = self.exporter.cycle_count

            return {
                "service": {
                    **self.config.get_service_info(),
                    "uptime_seconds": round(time.time() - self.start_time, 1),
                    "hostname": os.uname().nodename
                },
                "export": {
                    "interval_seconds": self.config.export_interval,
                    "database": self.config.influxdb_database,
                    "host": self.config.influxdb_host,
                    "last_export_seconds_ago": round(age, 1) if age != float('inf') else None,
                    "last_batch_size": self.exporter.last_batch_size,
                    "total_cycles": cycles,
                    "failed_writes": self.exporter.failed_writes,
                    "success_rate": round((cycles - self.exporter.failed_writes) / max(cycles, 1) * 100, 1)
                },
                "metrics": self.registry.names()
            }

        @self.app.post('/export')
        async def manual_export():
            """Run one export cycle immediately"""
            try:
                batch = await self.scheduler.run_once()
                return {
                    "message": "Export cycle completed",
                    "points_count": len(batch.points),
                    "total_cycles": self.exporter.cycle_count
                }
            except Exception as e:
                log_error(logger, e, {"component": "manual_export", "endpoint": "/export"})
                raise HTTPException(status_code=500, detail=str(e))

    def _setup_events(self):
        """Setup startup and shutdown events"""

        @self.app.on_event("startup")
        async def startup_event():
            logger.info(
                "Starting export loop",
                export_interval=self.config.export_interval,
                database=self.config.influxdb_database,
                event_type="exporter_startup"
            )
            self.export_task = asyncio.create_task(self.scheduler.run())

        @self.app.on_event("shutdown")
        async def shutdown_event():
            logger.info("Shutting down metrics exporter", event_type="exporter_shutdown")

            if self.export_task:
                self.export_task.cancel()
                try:
                    await self.export_task
                except asyncio.CancelledError:
                    pass

            self.scheduler.shutdown()
            self.client.close()

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
