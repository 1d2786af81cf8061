"""Write clients for time-series stores"""
from .base import BaseWriteClient, ExporterSetupError, WriteError, WriteClientFactory

__all__ = [
    'BaseWriteClient',
    'ExporterSetupError',
    'WriteError',
    'WriteClientFactory'
]
