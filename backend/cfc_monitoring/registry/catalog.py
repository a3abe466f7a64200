"""Default catalog of the platform backends monitored out of the box."""

from cfc_monitoring.config import Settings
from cfc_monitoring.models.service import Environment, ServiceType
from cfc_monitoring.registry.models import ServiceDefinition, ServiceMetadata


def environment_from_url(url: str) -> Environment:
    """Guess the deployment environment from a service URL."""
    if not url:
        return Environment.DEVELOPMENT
    if "localhost" in url or "127.0.0.1" in url:
        return Environment.DEVELOPMENT
    if "staging" in url or "test" in url:
        return Environment.STAGING
    return Environment.PRODUCTION


def default_catalog(settings: Settings) -> list[ServiceDefinition]:
    """Build definitions for the church platform's backends.

    Entries whose URL is not configured are skipped.
    """
    entries = [
        ServiceDefinition(
            name="management",
            display_name="Management Service",
            description="Members, prayer requests, users and administration API",
            url=settings.management_url,
            health_check_endpoint="/api/management/health",
            type=ServiceType.AUTH,
            category="authentication",
            tags=["management", "auth", "users", "admin"],
            critical=True,
            metadata=ServiceMetadata(owner="Development Team", department="IT", sla="99.9%"),
        ),
        ServiceDefinition(
            name="monitoring",
            display_name="Monitoring Service",
            description="Health monitoring, alerts and metrics",
            url=settings.monitoring_url,
            health_check_endpoint="/health",
            type=ServiceType.MONITORING,
            category="monitoring",
            tags=["monitoring", "metrics", "alerts"],
            critical=True,
            metadata=ServiceMetadata(owner="DevOps Team", department="Infrastructure", sla="99.95%"),
        ),
        ServiceDefinition(
            name="notify",
            display_name="Notification Service",
            description="WhatsApp, email and push notification delivery",
            url=settings.notify_url,
            health_check_endpoint="/health",
            type=ServiceType.EXTERNAL,
            category="notification",
            tags=["notifications", "email", "whatsapp"],
            metadata=ServiceMetadata(owner="Communication Team", department="Communication", sla="99.5%"),
        ),
        ServiceDefinition(
            name="chatbot",
            display_name="Chatbot Service",
            description="Automated chat assistant",
            url=settings.chatbot_url,
            health_check_endpoint="/api/chatbot/health",
            type=ServiceType.EXTERNAL,
            category="ai",
            tags=["chatbot", "assistant"],
            # Hosted off-site, cold starts are slow
            timeout_seconds=15.0,
            metadata=ServiceMetadata(owner="AI Team", department="Innovation", sla="98%"),
        ),
    ]

    catalog = []
    for entry in entries:
        if not entry.url or not entry.url.strip():
            continue
        entry.environment = environment_from_url(entry.url)
        if entry.name != "chatbot":
            entry.timeout_seconds = settings.probe_default_timeout_seconds
        entry.retry_attempts = settings.probe_default_retries
        catalog.append(entry)
    return catalog
