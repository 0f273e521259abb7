"""Unit tests for the resource service HTTP adapter."""

import json

import httpx
import pytest

from src.onboarding.core.exceptions import (
    ResourceConflict,
    ResourceServiceError,
    UpstreamUnavailable,
)
from src.onboarding.core.services import HttpResourceService

RECORD = {
    "id": 42,
    "name": "12345678900",
    "naturalKey": "12345678900",
    "createdAt": "2024-01-01T00:00:00Z",
}


def make_service(config, handler) -> HttpResourceService:
    return HttpResourceService(config, transport=httpx.MockTransport(handler))


class TestFindByNaturalKey:
    @pytest.mark.asyncio
    async def test_found(self, resource_service_config):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json=RECORD)

        record = await make_service(resource_service_config, handler).find_by_natural_key(
            "12345678900"
        )

        assert record.id == 42
        assert record.natural_key == "12345678900"
        assert seen == ["/api/v1/resources/12345678900"]

    @pytest.mark.asyncio
    async def test_not_found_is_none(self, resource_service_config):
        service = make_service(resource_service_config, lambda r: httpx.Response(404))
        assert await service.find_by_natural_key("12345678900") is None

    @pytest.mark.asyncio
    async def test_server_error_is_service_error(self, resource_service_config):
        service = make_service(
            resource_service_config, lambda r: httpx.Response(500, text="db down")
        )

        with pytest.raises(ResourceServiceError) as exc_info:
            await service.find_by_natural_key("12345678900")
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_key_is_path_escaped(self, resource_service_config):
        seen = []

        def handler(request):
            seen.append(request.url.raw_path)
            return httpx.Response(404)

        await make_service(resource_service_config, handler).find_by_natural_key("a/b")

        assert seen == [b"/api/v1/resources/a%2Fb"]

    @pytest.mark.asyncio
    async def test_unparseable_body(self, resource_service_config):
        service = make_service(
            resource_service_config, lambda r: httpx.Response(200, text="<html>")
        )

        with pytest.raises(ResourceServiceError):
            await service.find_by_natural_key("12345678900")

    @pytest.mark.asyncio
    async def test_transport_error(self, resource_service_config):
        def refuse(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamUnavailable):
            await make_service(resource_service_config, refuse).find_by_natural_key("k")


class TestCreateRecord:
    @pytest.mark.asyncio
    async def test_created(self, resource_service_config):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json=RECORD)

        record = await make_service(resource_service_config, handler).create_record(
            "12345678900", "12345678900"
        )

        assert record.id == 42
        assert bodies == [{"naturalKey": "12345678900", "name": "12345678900"}]

    @pytest.mark.asyncio
    async def test_conflict(self, resource_service_config):
        service = make_service(resource_service_config, lambda r: httpx.Response(409))
        with pytest.raises(ResourceConflict):
            await service.create_record("12345678900", "x")

    @pytest.mark.asyncio
    async def test_other_status_is_service_error(self, resource_service_config):
        service = make_service(resource_service_config, lambda r: httpx.Response(400))
        with pytest.raises(ResourceServiceError) as exc_info:
            await service.create_record("12345678900", "x")
        assert exc_info.value.status == 400
