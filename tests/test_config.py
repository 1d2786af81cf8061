"""Tests for configuration module"""
import os
from unittest.mock import patch
import pytest
from pydantic import ValidationError

from config import Config


class TestConfig:
    """Test configuration validation and parsing"""

    def test_default_config(self):
        """Test default configuration values"""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

        assert config.influxdb_host == "http://localhost:8086"
        assert config.influxdb_database == "metrics"
        assert config.influxdb_username == ""
        assert config.influxdb_password == ""
        assert config.export_interval == 10.0
        assert config.write_timeout is None
        assert config.status_enabled is True
        assert config.status_port == 9100
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_environment_override(self):
        """Test configuration override from environment variables"""
        env_vars = {
            "INFLUXDB_HOST": "https://influx.example.com:8443",
            "INFLUXDB_DATABASE": "app_metrics",
            "INFLUXDB_USERNAME": "writer",
            "INFLUXDB_PASSWORD": "secret",
            "EXPORT_INTERVAL": "2.5",
            "WRITE_TIMEOUT": "3",
            "STATUS_ENABLED": "false",
            "LOG_LEVEL": "DEBUG"
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = Config()

            assert config.influxdb_host == "https://influx.example.com:8443"
            assert config.influxdb_database == "app_metrics"
            assert config.influxdb_username == "writer"
            assert config.influxdb_password == "secret"
            assert config.export_interval == 2.5
            assert config.write_timeout == 3.0
            assert config.status_enabled is False
            assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("interval", ["0", "-5"])
    def test_validation_export_interval(self, interval):
        """Test the export interval must be positive"""
        with patch.dict(os.environ, {"EXPORT_INTERVAL": interval}):
            with pytest.raises(ValidationError):
                Config()

    def test_validation_write_timeout(self):
        """Test the write timeout must be positive when set"""
        with patch.dict(os.environ, {"WRITE_TIMEOUT": "0"}):
            with pytest.raises(ValidationError):
                Config()

    @pytest.mark.parametrize("host", ["localhost:8086", "ftp://influx.example.com", "http://", ""])
    def test_validation_influxdb_host(self, host):
        """Test that the endpoint must be an http(s) URL with a host"""
        with patch.dict(os.environ, {"INFLUXDB_HOST": host}):
            with pytest.raises(ValidationError):
                Config()

    def test_validation_influxdb_database(self):
        """Test that an empty database name is rejected"""
        with patch.dict(os.environ, {"INFLUXDB_DATABASE": ""}):
            with pytest.raises(ValidationError):
                Config()

    def test_validation_status_port(self):
        """Test validation of status port"""
        with patch.dict(os.environ, {"STATUS_PORT": "0"}):
            with pytest.raises(ValidationError):
                Config()

        with patch.dict(os.environ, {"STATUS_PORT": "70000"}):
            with pytest.raises(ValidationError):
                Config()

    def test_log_level_normalized(self):
        """Test log level is case-insensitive and validated"""
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            assert Config().log_level == "WARNING"

        with patch.dict(os.environ, {"LOG_LEVEL": "verbose"}):
            with pytest.raises(ValidationError):
                Config()

    def test_keyword_arguments(self):
        """Test configuration passed directly to the constructor"""
        config = Config(influxdb_database="direct", export_interval=1)

        assert config.influxdb_database == "direct"
        assert config.export_interval == 1.0

    def test_get_service_info(self):
        """Test service identity"""
        with patch.dict(os.environ, {}, clear=True):
            info = Config().get_service_info()

        assert info == {"name": "influxdb-metrics-exporter", "version": "1.0.0"}
