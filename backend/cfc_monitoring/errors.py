"""Monitoring error types."""


class MonitoringError(Exception):
    """Base exception for monitoring core errors."""
    pass


class NotFoundError(MonitoringError):
    """Referenced alert or service does not exist."""

    def __init__(self, message: str, entity: str = None, entity_id: str = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(MonitoringError):
    """Lifecycle operation attempted from an ineligible state."""

    def __init__(self, message: str, alert_id: str = None, current_status: str = None):
        super().__init__(message)
        self.alert_id = alert_id
        self.current_status = current_status


class ValidationError(MonitoringError):
    """Malformed input rejected before any processing."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class PersistenceError(MonitoringError):
    """Storage-layer fault. Not retried by the core."""

    def __init__(self, message: str, operation: str = None):
        super().__init__(message)
        self.operation = operation
