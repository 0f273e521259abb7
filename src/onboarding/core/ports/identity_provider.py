from abc import ABC, abstractmethod


class IdentityProviderPort(ABC):
    """Abstract interface for the identity provider.

    Accounts are keyed by username, which is always the caller's natural key.
    """

    @abstractmethod
    async def create_account(
        self, username: str, secret: str | None, attributes: dict[str, str]
    ) -> str:
        """Create an account.

        Args:
            username: Login name (natural key)
            secret: Password forwarded verbatim, or None for a password-less
                account that is created already confirmed
            attributes: Initial attribute map

        Returns:
            Provider-assigned subject identifier

        Raises:
            AccountAlreadyExists: If the username is taken
            UpstreamRejected: If the provider refused the account
            UpstreamUnavailable: On transport failure
        """
        raise NotImplementedError

    @abstractmethod
    async def confirm_account(self, username: str) -> None:
        """Administratively confirm an account, bypassing any out-of-band channel."""
        raise NotImplementedError

    @abstractmethod
    async def get_attributes(self, username: str) -> dict[str, str]:
        """Fetch the attribute map.

        Raises:
            AccountNotFound: If no such account exists
        """
        raise NotImplementedError

    @abstractmethod
    async def update_attributes(self, username: str, attributes: dict[str, str]) -> None:
        """Merge ``attributes`` into the account's attribute map."""
        raise NotImplementedError

    @abstractmethod
    async def delete_account(self, username: str) -> None:
        """Delete an account. Deleting an absent account is not an error."""
        raise NotImplementedError

    @abstractmethod
    async def verify_credentials(self, username: str, secret: str) -> None:
        """Check a username/password pair.

        Raises:
            AuthFailure: If the credentials are not accepted
        """
        raise NotImplementedError
