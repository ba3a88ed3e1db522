"""
Component Tests for PropertyDataClient

Runs the client against httpx.MockTransport.
"""

import httpx
import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import ServiceConfig
from microservices.automation_service.clients.property_client import PropertyDataClient
from microservices.automation_service.protocols import PropertyDataError

CONFIG = ServiceConfig(
    property_service_url="https://properties.test/",
    property_path_template="/residency/{property_id}",
    request_timeout=5.0,
)


def make_client(handler) -> PropertyDataClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PropertyDataClient(CONFIG, http_client=http_client)


@pytest.mark.asyncio
async def test_get_property():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "properties.test"
        assert request.url.path == "/residency/prop_1"
        return httpx.Response(200, json={"id": "prop_1", "financing": "Available"}, request=request)

    client = make_client(handler)
    data = await client.get_property("prop_1")

    assert data == {"id": "prop_1", "financing": "Available"}


@pytest.mark.asyncio
async def test_wrapped_document_unwrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"property": {"id": "prop_1"}}, request=request)

    data = await make_client(handler).get_property("prop_1")

    assert data == {"id": "prop_1"}


@pytest.mark.asyncio
async def test_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "missing"}, request=request)

    with pytest.raises(PropertyDataError) as exc:
        await make_client(handler).get_property("prop_9")
    assert exc.value.property_id == "prop_9"


@pytest.mark.asyncio
async def test_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "error"}, request=request)

    with pytest.raises(PropertyDataError, match="500"):
        await make_client(handler).get_property("prop_1")


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PropertyDataError):
        await make_client(handler).get_property("prop_1")


@pytest.mark.asyncio
async def test_invalid_json():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>", request=request)

    with pytest.raises(PropertyDataError):
        await make_client(handler).get_property("prop_1")


@pytest.mark.asyncio
async def test_close_keeps_injected_client_open():
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"id": "p"}, request=request)
    ))
    client = PropertyDataClient(CONFIG, http_client=http_client)

    await client.close()

    assert http_client.is_closed is False
    await http_client.aclose()
