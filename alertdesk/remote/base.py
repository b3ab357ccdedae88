"""Base alert store interface for AlertDesk."""

from abc import ABC, abstractmethod
from typing import Optional

from alertdesk.models import AlertDraft, AlertRecord


class BaseAlertStore(ABC):
    """Abstract CRUD interface over the service that owns the alerts.

    Implementations attempt every operation exactly once and keep no
    local cache; callers resync by calling fetch_all again.
    """

    @abstractmethod
    async def fetch_all(self) -> list[AlertRecord]:
        """Get every alert.

        Raises:
            RemoteError: On transport failure or a non-200 statusCode.
        """

    @abstractmethod
    async def create(self, draft: AlertDraft) -> AlertRecord:
        """Persist a draft.

        Returns:
            The record with its service-assigned ID.

        Raises:
            RemoteError: If the service rejects the draft or is unreachable.
        """

    @abstractmethod
    async def update(self, alert_id: str, patch: dict) -> Optional[AlertRecord]:
        """Update an existing alert.

        Args:
            alert_id: ID of the alert to change.
            patch: Fields to change, keyed by service field name.

        Returns:
            The updated record if the service echoes one, else None.

        Raises:
            RemoteError: If the update fails.
        """

    @abstractmethod
    async def delete(self, alert_id: str) -> None:
        """Delete an alert.

        Raises:
            RemoteError: If the alert does not exist or the call fails.
        """

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
