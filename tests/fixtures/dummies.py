"""Recording fakes for the identity provider and resource service ports.

Both wrap the in-memory adapters, log every call in ``calls`` and raise a
configured error for a method when asked to.
"""

from __future__ import annotations

from src.onboarding.core.models.resource import ResourceRecord
from src.onboarding.core.services import InMemoryIdentityProvider, InMemoryResourceService


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.failures: dict[str, Exception] = {}

    def fail(self, method: str, exc: Exception) -> None:
        self.failures[method] = exc

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def args_of(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, args))
        exc = self.failures.get(method)
        if exc is not None:
            raise exc


class RecordingIdentityProvider(_Recorder, InMemoryIdentityProvider):
    def __init__(self) -> None:
        _Recorder.__init__(self)
        InMemoryIdentityProvider.__init__(self)

    async def create_account(self, username, secret, attributes):
        self._record("create_account", username, dict(attributes))
        return await super().create_account(username, secret, attributes)

    async def confirm_account(self, username):
        self._record("confirm_account", username)
        await super().confirm_account(username)

    async def get_attributes(self, username):
        self._record("get_attributes", username)
        return await super().get_attributes(username)

    async def update_attributes(self, username, attributes):
        self._record("update_attributes", username, dict(attributes))
        await super().update_attributes(username, attributes)

    async def delete_account(self, username):
        self._record("delete_account", username)
        await super().delete_account(username)

    async def verify_credentials(self, username, secret):
        self._record("verify_credentials", username)
        await super().verify_credentials(username, secret)


class RecordingResourceService(_Recorder, InMemoryResourceService):
    def __init__(self, first_id: int = 42) -> None:
        _Recorder.__init__(self)
        InMemoryResourceService.__init__(self, first_id=first_id)

    async def find_by_natural_key(self, natural_key) -> ResourceRecord | None:
        self._record("find_by_natural_key", natural_key)
        return await super().find_by_natural_key(natural_key)

    async def create_record(self, natural_key, display_name) -> ResourceRecord:
        self._record("create_record", natural_key, display_name)
        return await super().create_record(natural_key, display_name)


class FakeClock:
    """Settable stand-in for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
