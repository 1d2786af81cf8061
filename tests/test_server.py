"""Tests for FastAPI status server"""
from unittest.mock import patch
from fastapi.testclient import TestClient

from app.server import ExporterServer
from config import Config
from metrics.instruments import Counter, Gauge
from metrics.registry import MetricsRegistry
from tests.helpers import RecordingWriteClient


class TestExporterServer:
    """Test status server functionality"""

    def setup_method(self):
        """Setup test fixtures"""
        self.config = Config(influxdb_database="app_metrics", export_interval=10)
        self.registry = MetricsRegistry()
        self.registry.register("requests", Counter()).inc(42)
        self.registry.register("queue_size", Gauge(7))
        self.write_client = RecordingWriteClient()
        self.server = ExporterServer(self.config, self.registry, self.write_client)
        self.client = TestClient(self.server.get_app())

    def teardown_method(self):
        self.server.scheduler.shutdown()

    def test_health_endpoint_healthy(self):
        """Test health endpoint when exports are recent"""
        self.server.exporter.last_export_time = 1234567890
        self.server.exporter.cycle_count = 10

        with patch('time.time', return_value=1234567890 + 10):
            response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["total_cycles"] == 10
        assert data["failed_writes"] == 0

    def test_health_endpoint_unhealthy(self):
        """Test health endpoint when the last export is too old"""
        self.server.exporter.last_export_time = 1234567890

        with patch('time.time', return_value=1234567890 + 100):
            response = self.client.get("/health")

        assert response.status_code == 503
        assert response.json()["detail"]["status"] == "unhealthy"

    def test_health_endpoint_before_first_export(self):
        """Test the service is unhealthy until something was exported"""
        response = self.client.get("/health")

        assert response.status_code == 503
        assert response.json()["detail"]["last_export_seconds_ago"] is None

    def test_status_endpoint(self):
        """Test status endpoint"""
        self.server.exporter.last_export_time = 1234567890
        self.server.exporter.cycle_count = 10
        self.server.exporter.failed_writes = 2
        self.server.exporter.last_batch_size = 2

        with patch('time.time', return_value=1234567890 + 10):
            with patch('os.uname') as mock_uname:
                mock_uname.return_value.nodename = "test-host"
                response = self.client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert data["service"]["name"] == "influxdb-metrics-exporter"
        assert data["service"]["hostname"] == "test-host"
        assert data["export"]["database"] == "app_metrics"
        assert data["export"]["last_batch_size"] == 2
        assert data["export"]["total_cycles"] == 10
        assert data["export"]["failed_writes"] == 2
        assert data["export"]["success_rate"] == 80.0
        assert data["metrics"] == ["requests", "queue_size"]

    def test_manual_export(self):
        """Test POST /export runs one cycle"""
        response = self.client.post("/export")

        assert response.status_code == 200
        data = response.json()
        assert data["points_count"] == 2
        assert data["total_cycles"] == 1
        assert len(self.write_client.batches) == 1
        assert self.write_client.batches[0].database == "app_metrics"

    def test_manual_export_with_failing_store(self):
        """Test a failed write still completes the request"""
        self.write_client.fail_with = RuntimeError("connection refused")

        response = self.client.post("/export")

        assert response.status_code == 200
        assert self.server.exporter.failed_writes == 1

    def test_lifecycle(self):
        """Test startup schedules the loop and shutdown closes the client"""
        with TestClient(self.server.get_app()):
            assert self.server.export_task is not None
            assert not self.server.export_task.done()

        assert self.server.export_task.done()
        assert self.write_client.closed is True
