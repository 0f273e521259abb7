"""In-memory resource service for development and tests."""

import itertools
from datetime import UTC, datetime

from src.onboarding.core.exceptions import ResourceConflict
from src.onboarding.core.models.resource import ResourceRecord
from src.onboarding.core.ports.resource_service import ResourceServicePort


class InMemoryResourceService(ResourceServicePort):
    """Resource service keeping records in a dictionary keyed by natural key."""

    def __init__(self, first_id: int = 1) -> None:
        self._records: dict[str, ResourceRecord] = {}
        self._ids = itertools.count(first_id)

    @property
    def records(self) -> dict[str, ResourceRecord]:
        return self._records

    async def find_by_natural_key(self, natural_key: str) -> ResourceRecord | None:
        return self._records.get(natural_key)

    async def create_record(self, natural_key: str, display_name: str) -> ResourceRecord:
        if natural_key in self._records:
            raise ResourceConflict()

        record = ResourceRecord(
            id=next(self._ids),
            name=display_name,
            natural_key=natural_key,
            created_at=datetime.now(UTC),
        )
        self._records[natural_key] = record
        return record
