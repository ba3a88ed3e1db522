#!/usr/bin/env python3
"""Modular configuration system for the automation service

Configuration hierarchy:
- automation_config: Service identity and campaign resolution settings
- service_config: External property data source
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig, configure_logging
from .service_config import ServiceConfig
from .automation_config import AutomationConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = AutomationConfig.from_env()

def get_settings() -> AutomationConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> AutomationConfig:
    """Reload settings from environment"""
    global settings
    settings = AutomationConfig.from_env()
    return settings

__all__ = [
    # Main config
    'AutomationConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'ServiceConfig',
    'configure_logging',
]
