from abc import ABC, abstractmethod

from src.onboarding.core.models.resource import ResourceRecord


class ResourceServicePort(ABC):
    """Abstract interface for the external resource (client record) service."""

    @abstractmethod
    async def find_by_natural_key(self, natural_key: str) -> ResourceRecord | None:
        """Look up a record.

        Returns:
            The record, or None when the service reports "not found"

        Raises:
            ResourceServiceError: On any other non-success answer
            UpstreamUnavailable: On transport failure
        """
        raise NotImplementedError

    @abstractmethod
    async def create_record(self, natural_key: str, display_name: str) -> ResourceRecord:
        """Create a record.

        Raises:
            ResourceConflict: If a record already exists for the natural key
            ResourceServiceError: On any other non-success answer
            UpstreamUnavailable: On transport failure
        """
        raise NotImplementedError
