#!/usr/bin/env python3
"""
Core Module for the automation service

Shared infrastructure components.

COMPONENTS:
    - config/: dataclass configuration loaded from environment (+ env files)

USAGE:
    from core.config import get_settings

    settings = get_settings()
"""

__version__ = "2.0.0"
