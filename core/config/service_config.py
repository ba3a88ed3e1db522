#!/usr/bin/env python3
"""Service configuration for the property data source

The automation service does not own property listings; it reads image URLs
and financing plan fields from an external property service.
"""
import os
from dataclasses import dataclass

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ServiceConfig:
    """Property data source endpoints"""

    # Base URL of the property listing service
    property_service_url: str = "https://api.landivo.com"

    # Path of a single property document
    property_path_template: str = "/residency/{property_id}"

    # Request timeout in seconds
    request_timeout: float = 30.0

    # Prefix for relative image paths returned by the property service
    image_base_url: str = "https://cdn.landivo.com"

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            property_service_url=os.getenv("PROPERTY_SERVICE_URL", "https://api.landivo.com"),
            property_path_template=os.getenv("PROPERTY_PATH_TEMPLATE", "/residency/{property_id}"),
            request_timeout=_float(os.getenv("PROPERTY_REQUEST_TIMEOUT", "30"), 30.0),
            image_base_url=os.getenv("PROPERTY_IMAGE_BASE_URL", "https://cdn.landivo.com"),
        )
