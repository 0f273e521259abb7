"""Keycloak Admin REST API adapter for the identity provider port."""

from typing import Any

import httpx
from loguru import logger

from src.onboarding.core.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    AuthFailure,
    UpstreamRejected,
    UpstreamUnavailable,
)
from src.onboarding.core.ports.identity_provider import IdentityProviderPort
from src.onboarding.runtime.config.config_data import IdentityProviderConfig


def _to_keycloak_attributes(attributes: dict[str, str]) -> dict[str, list[str]]:
    return {name: [str(value)] for name, value in attributes.items()}


def _from_keycloak_attributes(attributes: dict[str, Any] | None) -> dict[str, str]:
    flat: dict[str, str] = {}
    for name, value in (attributes or {}).items():
        if isinstance(value, list):
            if value:
                flat[name] = str(value[0])
        elif value is not None:
            flat[name] = str(value)
    return flat


class KeycloakIdentityProvider(IdentityProviderPort):
    """Identity provider backed by a Keycloak realm.

    Admin operations authenticate with a service-account client
    (client_credentials grant). Accounts created with a secret start disabled
    and are enabled by ``confirm_account``; password-less accounts are
    created enabled.

    A new ``httpx.AsyncClient`` is opened per operation, so the adapter holds
    no connection state between requests.
    """

    def __init__(
        self,
        config: IdentityProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    # ------------------------------------------------------------------ http
    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
        )

    @property
    def _token_path(self) -> str:
        return f"/realms/{self._config.realm}/protocol/openid-connect/token"

    @property
    def _users_path(self) -> str:
        return f"/admin/realms/{self._config.realm}/users"

    async def _send(
        self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            return await client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning(f"Identity provider unreachable: {method} {url}: {exc}")
            raise UpstreamUnavailable(detail=str(exc)) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return

        status = response.status_code
        detail = f"{action}: HTTP {status}: {response.text[:500]}"
        logger.info(f"Identity provider rejected {action} with HTTP {status}")

        if status == 409:
            raise AccountAlreadyExists(detail=detail)
        if status == 404:
            raise AccountNotFound(detail=detail)
        if status >= 500:
            raise UpstreamUnavailable(detail=detail)
        raise UpstreamRejected(detail=detail)

    async def _admin_headers(self, client: httpx.AsyncClient) -> dict[str, str]:
        data = {
            "grant_type": "client_credentials",
            "client_id": self._config.admin_client_id,
            "client_secret": self._config.admin_client_secret,
        }
        response = await self._send(client, "POST", self._token_path, data=data)
        self._raise_for_status(response, "admin authentication")

        access_token = response.json().get("access_token")
        if not access_token:
            raise UpstreamRejected(detail="admin authentication returned no access token")

        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def _find_user(
        self, client: httpx.AsyncClient, headers: dict[str, str], username: str
    ) -> dict[str, Any] | None:
        response = await self._send(
            client,
            "GET",
            self._users_path,
            params={"username": username, "exact": "true"},
            headers=headers,
        )
        self._raise_for_status(response, "user lookup")

        # Keycloak stores usernames lowercased
        wanted = username.lower()
        for user in response.json():
            if str(user.get("username", "")).lower() == wanted:
                return user
        return None

    async def _require_user(
        self, client: httpx.AsyncClient, headers: dict[str, str], username: str
    ) -> dict[str, Any]:
        user = await self._find_user(client, headers, username)
        if user is None:
            raise AccountNotFound(detail=f"no account for username {username!r}")
        return user

    async def _put_user(
        self,
        client: httpx.AsyncClient,
        headers: dict[str, str],
        user: dict[str, Any],
        action: str,
    ) -> None:
        response = await self._send(
            client, "PUT", f"{self._users_path}/{user['id']}", json=user, headers=headers
        )
        self._raise_for_status(response, action)

    # ------------------------------------------------------------------ port
    async def create_account(
        self, username: str, secret: str | None, attributes: dict[str, str]
    ) -> str:
        user_data: dict[str, Any] = {
            "username": username,
            "enabled": secret is None,
            "emailVerified": secret is None,
            "attributes": _to_keycloak_attributes(attributes),
        }
        if secret is not None:
            user_data["credentials"] = [
                {"type": "password", "value": secret, "temporary": False}
            ]

        async with self._client() as client:
            headers = await self._admin_headers(client)
            response = await self._send(
                client, "POST", self._users_path, json=user_data, headers=headers
            )
            self._raise_for_status(response, "account creation")

            # The new user's id is the last segment of the Location header
            location = response.headers.get("Location")
            if location:
                return location.rstrip("/").rsplit("/", 1)[-1]

            user = await self._require_user(client, headers, username)
            return str(user["id"])

    async def confirm_account(self, username: str) -> None:
        async with self._client() as client:
            headers = await self._admin_headers(client)
            user = await self._require_user(client, headers, username)
            user.update({"enabled": True, "emailVerified": True, "requiredActions": []})
            await self._put_user(client, headers, user, "account confirmation")

    async def get_attributes(self, username: str) -> dict[str, str]:
        async with self._client() as client:
            headers = await self._admin_headers(client)
            user = await self._require_user(client, headers, username)
            return _from_keycloak_attributes(user.get("attributes"))

    async def update_attributes(self, username: str, attributes: dict[str, str]) -> None:
        async with self._client() as client:
            headers = await self._admin_headers(client)
            user = await self._require_user(client, headers, username)

            # PUT replaces the whole attribute map, so merge first
            merged = dict(user.get("attributes") or {})
            merged.update(_to_keycloak_attributes(attributes))
            user["attributes"] = merged
            await self._put_user(client, headers, user, "attribute update")

    async def delete_account(self, username: str) -> None:
        async with self._client() as client:
            headers = await self._admin_headers(client)
            user = await self._find_user(client, headers, username)
            if user is None:
                logger.debug(f"Account {username} already absent; nothing to delete")
                return

            response = await self._send(
                client, "DELETE", f"{self._users_path}/{user['id']}", headers=headers
            )
            if response.status_code == 404:
                return
            self._raise_for_status(response, "account deletion")

    async def verify_credentials(self, username: str, secret: str) -> None:
        data = {
            "grant_type": "password",
            "client_id": self._config.client_id,
            "username": username,
            "password": secret,
            "scope": "openid",
        }
        if self._config.client_secret:
            data["client_secret"] = self._config.client_secret

        async with self._client() as client:
            response = await self._send(client, "POST", self._token_path, data=data)

        if response.is_success:
            return
        if response.status_code in (400, 401):
            logger.info(f"Password login rejected for {username}")
            raise AuthFailure(detail=f"HTTP {response.status_code}")
        self._raise_for_status(response, "password login")
