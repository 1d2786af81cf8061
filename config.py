"""Configuration for the InfluxDB metrics exporter"""
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Exporter configuration loaded from environment variables"""

    # InfluxDB connection
    influxdb_host: str = Field(default="http://localhost:8086", description="InfluxDB endpoint URL")
    influxdb_database: str = Field(default="metrics", description="Target database for every batch")
    influxdb_username: str = Field(default="", description="InfluxDB username")
    influxdb_password: str = Field(default="", description="InfluxDB password")

    # Export settings
    export_interval: float = Field(default=10.0, gt=0, description="Export interval in seconds")
    write_timeout: Optional[float] = Field(default=None, gt=0, description="Write timeout in seconds")

    # Status server settings
    status_enabled: bool = Field(default=True, description="Serve /health and /status over HTTP")
    status_port: int = Field(default=9100, ge=1, le=65535, description="Status server port")
    status_host: str = Field(default="0.0.0.0", description="Status server host")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file")

    # Service identification
    service_name: str = Field(default="influxdb-metrics-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('influxdb_host')
    def validate_influxdb_host(cls, v):
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"INFLUXDB_HOST must be an http(s) URL, got {v!r}")
        return v

    @validator('influxdb_database')
    def validate_influxdb_database(cls, v):
        if not v:
            raise ValueError("INFLUXDB_DATABASE is required")
        return v

    @validator('log_level')
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def get_service_info(self) -> Dict[str, str]:
        """Get service identity for the status surface"""
        return {
            "name": self.service_name,
            "version": self.service_version,
        }
