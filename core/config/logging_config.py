#!/usr/bin/env python3
"""Logging configuration"""
import logging
import os
from dataclasses import dataclass

def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: str = ""
    enable_console: bool = True

    # Service identity for logging
    service_name: str = "automation_service"
    environment: str = "development"

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging config from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            log_format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=_bool(os.getenv("LOG_TO_CONSOLE", "true")),
            service_name=os.getenv("SERVICE_NAME", "automation_service"),
            environment=env,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Apply the logging config to the root logger.

    Does nothing if the root logger already has handlers, so it is safe to
    call from every factory initialization.
    """
    handlers = []
    if config.enable_console:
        handlers.append(logging.StreamHandler())
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if handlers:
        logging.basicConfig(level=level, format=config.log_format, handlers=handlers)
    else:
        logging.basicConfig(level=level, format=config.log_format)
