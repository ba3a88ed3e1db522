"""
Property Service Client

Client for the property listing service: image URLs and financing plan
fields of a single property.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config import ServiceConfig

from ..protocols import PropertyDataError

logger = logging.getLogger(__name__)


class PropertyDataClient:
    """Client for the property listing service"""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        config = config or ServiceConfig.from_env()
        self.base_url = config.property_service_url.rstrip("/")
        self.path_template = config.property_path_template
        self.timeout = config.request_timeout
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def get_property(self, property_id: str) -> Dict[str, Any]:
        """
        Get a property document.

        Raises:
            PropertyDataError: property missing, non-2xx response or transport failure
        """
        path = self.path_template.format(property_id=property_id)
        try:
            response = await self._get_client().get(f"{self.base_url}{path}")
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.warning(f"Property not found: {property_id}")
                raise PropertyDataError(f"Property not found: {property_id}", property_id) from e
            logger.error(f"Error getting property {property_id}: {e}")
            raise PropertyDataError(
                f"Property service returned {e.response.status_code} for {property_id}",
                property_id,
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Error getting property {property_id}: {e}")
            raise PropertyDataError(f"Property service unreachable: {e}", property_id) from e

        except ValueError as e:
            raise PropertyDataError(f"Invalid property document for {property_id}", property_id) from e

        # Some deployments wrap the document as {"property": {...}}
        if isinstance(data, dict) and isinstance(data.get("property"), dict):
            data = data["property"]
        if not isinstance(data, dict):
            raise PropertyDataError(f"Invalid property document for {property_id}", property_id)
        return data

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
