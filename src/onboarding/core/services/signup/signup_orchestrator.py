"""Signup saga: identity creation, confirmation and resource linking."""

from loguru import logger

from src.onboarding.core.exceptions import OnboardingError, SignupFailed
from src.onboarding.core.models.resource import ResourceRecord
from src.onboarding.core.models.saga import SagaState, SignupResult
from src.onboarding.core.ports.identity_provider import IdentityProviderPort
from src.onboarding.core.ports.resource_service import ResourceServicePort
from src.onboarding.core.services.signup.compensation import SagaRun
from src.onboarding.core.validation import normalize_natural_key


class SignupOrchestrator:
    """Drive the signup saga across the identity provider and resource service.

    Steps run strictly in sequence:

    1. create the identity (username = natural key)
    2. confirm it administratively
    3. look up the resource record, creating it only on "not found"
    4. write the resource id onto the identity's attributes

    Once step 1 succeeds, deleting the identity is registered as a
    compensating action. Any later failure unwinds the registered actions
    before the failure is reported. The resource record is never deleted:
    a later signup for the same natural key finds and reuses it.
    """

    def __init__(
        self,
        identity_provider: IdentityProviderPort,
        resource_service: ResourceServicePort,
        natural_key_attribute: str = "natural_key",
        link_attribute: str = "resource_id",
    ):
        self._identity_provider = identity_provider
        self._resource_service = resource_service
        self._natural_key_attribute = natural_key_attribute
        self._link_attribute = link_attribute

    async def signup(self, natural_key: str, secret: str) -> SignupResult:
        """Run the saga for one natural key.

        Args:
            natural_key: Caller's natural key, used as the identity username
            secret: Password forwarded verbatim to the identity provider

        Returns:
            The linked resource id and the identity's subject id

        Raises:
            InputValidationError: If the natural key is empty or malformed
            SignupFailed: If a step failed; compensation has already run
        """
        natural_key = normalize_natural_key(natural_key)
        run = SagaRun(natural_key)
        idp = self._identity_provider

        with logger.contextualize(natural_key=natural_key):
            logger.info("signup.start")

            try:
                subject_id = await idp.create_account(
                    natural_key, secret, {self._natural_key_attribute: natural_key}
                )
            except Exception as exc:
                raise await self._abort(run, SignupFailed.IDENTITY_CREATION_FAILED, exc) from exc
            run.advance(SagaState.IDENTITY_CREATED)
            run.compensations.push(
                "delete_identity", lambda: idp.delete_account(natural_key)
            )

            try:
                await idp.confirm_account(natural_key)
            except Exception as exc:
                raise await self._abort(run, SignupFailed.CONFIRMATION_FAILED, exc) from exc
            run.advance(SagaState.IDENTITY_CONFIRMED)

            try:
                record = await self._resolve_resource(natural_key)
            except Exception as exc:
                raise await self._abort(run, SignupFailed.RESOURCE_LINK_FAILED, exc) from exc
            run.advance(SagaState.RESOURCE_LINKED)

            try:
                await idp.update_attributes(
                    natural_key, {self._link_attribute: str(record.id)}
                )
            except Exception as exc:
                raise await self._abort(run, SignupFailed.LINK_PERSIST_FAILED, exc) from exc
            run.advance(SagaState.COMPLETED)

            logger.bind(resource_id=record.id).info("signup.completed")
            return SignupResult(
                natural_key=natural_key,
                resource_id=record.id,
                subject_id=subject_id,
                state=run.state,
            )

    async def _resolve_resource(self, natural_key: str) -> ResourceRecord:
        record = await self._resource_service.find_by_natural_key(natural_key)
        if record is not None:
            logger.info(f"Reusing resource record {record.id}")
            return record

        record = await self._resource_service.create_record(natural_key, natural_key)
        logger.info(f"Created resource record {record.id}")
        return record

    async def _abort(self, run: SagaRun, reason: str, exc: Exception) -> SignupFailed:
        detail = exc.detail if isinstance(exc, OnboardingError) else None
        logger.bind(saga_state=run.state.value, reason=reason).warning(
            f"Signup step failed: {type(exc).__name__}: {detail or exc}"
        )

        if not run.compensations:
            # nothing was created, so the run stays at the state it reached
            return SignupFailed(reason, run.state, exc, history=tuple(run.history))

        failures = await run.compensations.unwind()
        if failures:
            run.advance(SagaState.FAILED_IRRECOVERABLE)
            logger.bind(reason=reason).error(
                f"Signup left remote state behind; failed compensations: "
                f"{[name for name, _ in failures]}"
            )
        else:
            run.advance(SagaState.ROLLED_BACK)

        return SignupFailed(reason, run.state, exc, history=tuple(run.history))
