"""Shared fixtures: an in-memory alert service behind httpx.MockTransport."""

import json
from typing import Optional

import httpx
import pytest

from alertdesk.controllers import NotificationScheduler
from alertdesk.remote import RemoteAlertStore

BASE_URL = "http://alerts.test"

# Short enough to keep tests fast, long enough not to expire mid-test
TEST_DELAY = 0.05


class FakeAlertService:
    """Mimics the alert service: envelopes with statusCode, ``_id`` keys."""

    def __init__(self):
        self.alerts: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_next: Optional[tuple[int, str]] = None
        self.offline = False
        self._next_id = 1

    def add(self, **fields) -> dict:
        """Seed an alert and return its stored payload."""
        alert_id = f"a{self._next_id}"
        self._next_id += 1
        record = {
            "_id": alert_id,
            "script_name": "NIFTY",
            "alert_for": 1,
            "hit_side": "BUY",
            "price": 100,
            "comment": "",
        }
        record.update(fields)
        self.alerts[alert_id] = record
        return record

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def store(self) -> RemoteAlertStore:
        return RemoteAlertStore(base_url=BASE_URL, transport=self.transport)

    def calls(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        if self.fail_next is not None:
            status, message = self.fail_next
            self.fail_next = None
            return httpx.Response(200, json={"statusCode": status, "message": message})

        path = request.url.path
        alert_id = path.rsplit("/", 1)[-1]

        if request.method == "GET" and path == "/stocks/alert/get-all":
            return self._ok(list(self.alerts.values()))

        if request.method == "POST" and path == "/stocks/alert/create":
            body = json.loads(request.content)
            if not body.get("script_name"):
                return httpx.Response(400, json={"statusCode": 400, "message": "script_name is required"})
            record = self.add(**body)
            return self._ok(record)

        if request.method == "PUT" and path.startswith("/stocks/alert/update/"):
            if alert_id not in self.alerts:
                return httpx.Response(200, json={"statusCode": 404, "message": "Alert not found"})
            body = json.loads(request.content)
            body.pop("_id", None)
            self.alerts[alert_id].update(body)
            return self._ok(self.alerts[alert_id])

        if request.method == "DELETE" and path.startswith("/stocks/alert/delete/"):
            if alert_id not in self.alerts:
                return httpx.Response(200, json={"statusCode": 404, "message": "Alert not found"})
            del self.alerts[alert_id]
            return httpx.Response(200, json={"statusCode": 200, "message": "Alert deleted"})

        return httpx.Response(404, json={"statusCode": 404, "message": "Route not found"})

    @staticmethod
    def _ok(data) -> httpx.Response:
        return httpx.Response(200, json={"statusCode": 200, "data": data})


@pytest.fixture
def service() -> FakeAlertService:
    return FakeAlertService()


@pytest.fixture
def store(service: FakeAlertService) -> RemoteAlertStore:
    return service.store()


@pytest.fixture
def notifier() -> NotificationScheduler:
    scheduler = NotificationScheduler(delay=TEST_DELAY)
    yield scheduler
    scheduler.close()
