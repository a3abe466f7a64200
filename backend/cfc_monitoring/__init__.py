"""CFC monitoring core: service health, alert lifecycle and system status."""

__version__ = "0.1.0"
