"""Alert store backed by the hosted alert service's JSON API."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from alertdesk.config import DEFAULT_BASE_URL
from alertdesk.errors import ApplicationError, TransportError
from alertdesk.models import AlertDraft, AlertRecord, Envelope, normalize_record
from alertdesk.remote.base import BaseAlertStore

logger = logging.getLogger(__name__)


# Endpoint paths on the alert service
GET_ALL_PATH = "/stocks/alert/get-all"
CREATE_PATH = "/stocks/alert/create"
UPDATE_PATH = "/stocks/alert/update/{id}"
DELETE_PATH = "/stocks/alert/delete/{id}"


class RemoteAlertStore(BaseAlertStore):
    """Alert store talking JSON over HTTP to the alert service.

    The service reports success through the ``statusCode`` field of its
    response envelope rather than the HTTP status, so every call is
    judged on the envelope.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 7.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the store.

        Args:
            base_url: Service root, e.g. ``https://alerts.example.com``.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Envelope:
        """Send one request and return its envelope if statusCode is 200.

        Raises:
            TransportError: If no usable response came back.
            ApplicationError: If the envelope reports a failure.
        """
        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            resp = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(f"Could not reach alert service: {e}") from e

        try:
            envelope = Envelope.model_validate(resp.json())
        except (ValueError, PydanticValidationError):
            logger.warning("%s %s returned HTTP %s without a JSON envelope", method, path, resp.status_code)
            raise TransportError(f"Unexpected response from alert service (HTTP {resp.status_code})") from None

        if not envelope.ok:
            status = envelope.status_code if envelope.status_code is not None else resp.status_code
            message = envelope.message or f"Request failed with status {status}"
            logger.warning("%s %s rejected (%s): %s", method, path, status, message)
            raise ApplicationError(status, message)

        return envelope

    @staticmethod
    def _record(data: Any) -> AlertRecord:
        try:
            return normalize_record(data)
        except PydanticValidationError as e:
            raise ApplicationError(200, f"Malformed alert in response: {e}") from e

    async def fetch_all(self) -> list[AlertRecord]:
        envelope = await self._request("GET", GET_ALL_PATH)
        if envelope.data is None:
            return []
        if not isinstance(envelope.data, list):
            raise ApplicationError(envelope.status_code, "Alert list response is not a list")
        return [self._record(item) for item in envelope.data]

    async def create(self, draft: AlertDraft) -> AlertRecord:
        envelope = await self._request(
            "POST",
            CREATE_PATH,
            json=draft.to_wire(),
            headers={"Content-Type": "application/json"},
        )
        if envelope.data is None:
            raise ApplicationError(envelope.status_code, "Alert service did not return the created alert")
        record = self._record(envelope.data)
        logger.info("Created alert %s on %s", record.id, record.instrument)
        return record

    async def update(self, alert_id: str, patch: dict) -> Optional[AlertRecord]:
        envelope = await self._request("PUT", UPDATE_PATH.format(id=alert_id), json=patch)
        logger.info("Updated alert %s", alert_id)
        if envelope.data is None:
            return None

        # Some deployments answer with a write summary instead of the alert
        try:
            record = normalize_record(envelope.data)
        except PydanticValidationError:
            logger.debug("Update of %s returned no alert body", alert_id)
            return None
        if record.id != alert_id:
            logger.warning("Service echoed alert %s for update of %s", record.id, alert_id)
            record = record.model_copy(update={"id": alert_id})
        return record

    async def delete(self, alert_id: str) -> None:
        await self._request("DELETE", DELETE_PATH.format(id=alert_id))
        logger.info("Deleted alert %s", alert_id)
