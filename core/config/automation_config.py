#!/usr/bin/env python3
"""Automation service main configuration

Combines the logging and property-source sub-configs with the settings
that govern campaign resolution.
"""
import os
from dataclasses import dataclass, field

from .logging_config import LoggingConfig
from .service_config import ServiceConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class AutomationConfig:
    """Main automation service configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Service identity
    service_name: str = "automation_service"
    service_port: int = 8260

    # Upper bound on concurrent property fetches for one campaign
    max_fetch_concurrency: int = 5

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    services: ServiceConfig = field(default_factory=ServiceConfig)

    def __post_init__(self):
        if self.max_fetch_concurrency < 1:
            self.max_fetch_concurrency = 1

    @classmethod
    def from_env(cls) -> 'AutomationConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),

            service_name=os.getenv("SERVICE_NAME", "automation_service"),
            service_port=_int(os.getenv("SERVICE_PORT", "8260"), 8260),

            max_fetch_concurrency=_int(os.getenv("AUTOMATION_MAX_FETCH_CONCURRENCY", "5"), 5),

            logging=LoggingConfig.from_env(),
            services=ServiceConfig.from_env(),
        )
