"""HTTP adapter for the external resource (client record) service."""

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import ValidationError

from src.onboarding.core.exceptions import (
    ResourceConflict,
    ResourceServiceError,
    UpstreamUnavailable,
)
from src.onboarding.core.models.resource import ResourceRecord
from src.onboarding.core.ports.resource_service import ResourceServicePort
from src.onboarding.runtime.config.config_data import ResourceServiceConfig


class HttpResourceService(ResourceServicePort):
    """Resource service reached over its REST interface.

    ``GET {resources_path}/{naturalKey}`` answers 200 with the record or 404;
    ``POST {resources_path}`` answers 201 with the created record. Only a 404
    on lookup means "not found"; every other non-success status is a service
    error.
    """

    def __init__(
        self,
        config: ResourceServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning(f"Resource service unreachable: {method} {url}: {exc}")
            raise UpstreamUnavailable(detail=str(exc)) from exc

    @staticmethod
    def _parse_record(response: httpx.Response) -> ResourceRecord:
        try:
            return ResourceRecord.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ResourceServiceError(
                "Error parsing resource data",
                status=response.status_code,
                detail=str(exc),
            ) from exc

    async def find_by_natural_key(self, natural_key: str) -> ResourceRecord | None:
        path = f"{self._config.resources_path}/{quote(natural_key, safe='')}"
        response = await self._send("GET", path)

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.warning(f"Resource lookup failed with HTTP {response.status_code}")
            raise ResourceServiceError(
                "Error on resource lookup",
                status=response.status_code,
                detail=response.text[:500],
            )
        return self._parse_record(response)

    async def create_record(self, natural_key: str, display_name: str) -> ResourceRecord:
        response = await self._send(
            "POST",
            self._config.resources_path,
            json={"naturalKey": natural_key, "name": display_name},
        )

        if response.status_code == 409:
            raise ResourceConflict(detail=response.text[:500])
        if response.status_code != 201:
            logger.warning(f"Resource creation failed with HTTP {response.status_code}")
            raise ResourceServiceError(
                "Error creating resource",
                status=response.status_code,
                detail=response.text[:500],
            )
        return self._parse_record(response)
