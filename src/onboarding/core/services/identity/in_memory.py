"""In-memory identity provider for development and tests."""

import hmac
import uuid

from loguru import logger

from src.onboarding.core.exceptions import (
    AccountAlreadyExists,
    AccountNotFound,
    AuthFailure,
)
from src.onboarding.core.models.identity import IdentityAccount
from src.onboarding.core.ports.identity_provider import IdentityProviderPort


class InMemoryIdentityProvider(IdentityProviderPort):
    """Identity provider keeping accounts in a dictionary."""

    def __init__(self) -> None:
        self._accounts: dict[str, IdentityAccount] = {}

    @property
    def accounts(self) -> dict[str, IdentityAccount]:
        return self._accounts

    def _get(self, username: str) -> IdentityAccount:
        account = self._accounts.get(username)
        if account is None:
            raise AccountNotFound(detail=f"no account for username {username!r}")
        return account

    async def create_account(
        self, username: str, secret: str | None, attributes: dict[str, str]
    ) -> str:
        if username in self._accounts:
            raise AccountAlreadyExists()

        account = IdentityAccount(
            username=username,
            subject_id=str(uuid.uuid4()),
            attributes=dict(attributes),
            confirmed=secret is None,
            secret=secret,
        )
        self._accounts[username] = account
        logger.debug(f"Created in-memory account {username}")
        return account.subject_id

    async def confirm_account(self, username: str) -> None:
        self._get(username).confirmed = True

    async def get_attributes(self, username: str) -> dict[str, str]:
        return dict(self._get(username).attributes)

    async def update_attributes(self, username: str, attributes: dict[str, str]) -> None:
        self._get(username).attributes.update(attributes)

    async def delete_account(self, username: str) -> None:
        self._accounts.pop(username, None)

    async def verify_credentials(self, username: str, secret: str) -> None:
        account = self._accounts.get(username)
        if (
            account is None
            or not account.confirmed
            or account.secret is None
            or not hmac.compare_digest(account.secret, secret)
        ):
            raise AuthFailure()
