"""Token issuance for callers identified by their natural key."""

import uuid

from loguru import logger

from src.onboarding.core.exceptions import AccountAlreadyExists, AuthFailure
from src.onboarding.core.models.resource import ResourceRecord
from src.onboarding.core.models.saga import IssuedToken
from src.onboarding.core.ports.identity_provider import IdentityProviderPort
from src.onboarding.core.ports.resource_service import ResourceServicePort
from src.onboarding.core.services.jwt.token_codec import TokenCodec
from src.onboarding.core.validation import normalize_natural_key

RESOURCE_ID_CLAIM = "resource_id"
NATURAL_KEY_CLAIM = "natural_key"


def placeholder_display_name() -> str:
    return f"name-{uuid.uuid4()}"


class AuthOrchestrator:
    """Look up or create the caller's resource record, then mint a token.

    Without a secret this is the trusted-caller path: whoever can reach it is
    assumed to have authenticated the natural key already. With a secret the
    credentials are checked against the identity provider first.

    Nothing here is compensated. A resource record created before a later
    step fails is left in place and is found by the next attempt.
    """

    def __init__(
        self,
        identity_provider: IdentityProviderPort,
        resource_service: ResourceServicePort,
        token_codec: TokenCodec,
        token_ttl: int = 3600,
        link_attribute: str = "resource_id",
        natural_key_attribute: str = "natural_key",
        allow_trusted_callers: bool = True,
    ):
        self._identity_provider = identity_provider
        self._resource_service = resource_service
        self._token_codec = token_codec
        self._token_ttl = token_ttl
        self._link_attribute = link_attribute
        self._natural_key_attribute = natural_key_attribute
        self._allow_trusted_callers = allow_trusted_callers

    async def authenticate(self, natural_key: str, secret: str | None = None) -> IssuedToken:
        """Issue a token bound to the caller's resource record.

        Args:
            natural_key: Caller's natural key
            secret: Password to check, or None for the trusted-caller path

        Raises:
            InputValidationError: If the natural key is empty or malformed
            AuthFailure: If the credentials are rejected, or the trusted path
                is disabled and no secret was given
            UpstreamError: If either external system fails
        """
        natural_key = normalize_natural_key(natural_key)

        with logger.contextualize(natural_key=natural_key):
            if secret is not None:
                await self._identity_provider.verify_credentials(natural_key, secret)
            elif not self._allow_trusted_callers:
                logger.info("Trusted-caller authentication is disabled")
                raise AuthFailure(detail="trusted-caller path disabled")

            record = await self._resource_service.find_by_natural_key(natural_key)
            created = record is None
            if record is None:
                record = await self._provision(natural_key)

            claims = {RESOURCE_ID_CLAIM: record.id, NATURAL_KEY_CLAIM: natural_key}
            token, expires_at = self._token_codec.issue_with_expiry(
                claims, self._token_ttl
            )
            logger.bind(resource_id=record.id).info("auth.token_issued")

            return IssuedToken(
                token=token,
                resource_id=record.id,
                natural_key=natural_key,
                expires_at=expires_at,
                created_resource=created,
            )

    async def _provision(self, natural_key: str) -> ResourceRecord:
        record = await self._resource_service.create_record(
            natural_key, placeholder_display_name()
        )
        logger.info(f"Created resource record {record.id}")

        link = {
            self._natural_key_attribute: natural_key,
            self._link_attribute: str(record.id),
        }
        try:
            await self._identity_provider.create_account(natural_key, None, link)
        except AccountAlreadyExists:
            logger.info("Identity already exists; relinking it to the new record")
            await self._identity_provider.update_attributes(natural_key, link)
        return record
