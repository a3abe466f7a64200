from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./monitoring.db"

    # App
    app_name: str = "CFC Monitoring Service"
    debug: bool = False
    log_level: str = "INFO"

    # Monitored backends of the church platform
    management_url: str = "http://localhost:7000"
    notify_url: str = "http://localhost:7002"
    monitoring_url: str = "http://localhost:7001"
    chatbot_url: str = "https://cfc-push-projectchatbot-backend.onrender.com"

    # Health probing
    probe_scheduler_enabled: bool = True
    probe_interval_seconds: int = 30
    probe_concurrency: int = 10
    probe_default_timeout_seconds: float = 10.0
    probe_default_retries: int = 2

    # Rolling service metrics
    latency_ema_alpha: float = 0.3
    error_rate_step: float = 1.0
    uptime_success_step: float = 0.1
    uptime_failure_step: float = 1.0

    # Alert lifecycle
    default_mute_hours: int = 24
    max_escalation_level: int = 5
    escalation_enabled: bool = False
    escalation_check_interval_seconds: int = 60
    # (level, minutes the alert has been open)
    escalation_rules: list[tuple[int, int]] = [(1, 30), (2, 60), (3, 120)]

    # System resources
    resource_threshold_percent: float = 90.0
    disk_path: str = "/"

    class Config:
        env_file = ".env"
