"""
Automation Service Clients

Clients for calling the external property data source.
"""

from .property_client import PropertyDataClient

__all__ = [
    "PropertyDataClient",
]
