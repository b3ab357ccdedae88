"""Tests for the HTTP alert store."""

import json

import httpx
import pytest

from alertdesk.errors import ApplicationError, RemoteError, TransportError
from alertdesk.models import AlertDraft, Category
from alertdesk.remote import BaseAlertStore, RemoteAlertStore

from conftest import BASE_URL


def _store_with(handler) -> RemoteAlertStore:
    return RemoteAlertStore(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestFetchAll:
    """Listing alerts is judged on the envelope's statusCode."""

    @pytest.mark.asyncio
    async def test_returns_normalized_records(self, service, store):
        service.add(script_name="NIFTY", alert_for=0, hit_side="BUY", price=100)
        service.add(script_name="DABUR", alert_for=None, hit_side="", price="550")

        records = await store.fetch_all()

        assert [r.instrument for r in records] == ["NIFTY", "DABUR"]
        assert records[0].category is Category.INTRADAY
        assert records[1].category is None
        assert records[1].side is None
        assert records[1].price == 550.0

    @pytest.mark.asyncio
    async def test_empty_list(self, store):
        assert await store.fetch_all() == []

    @pytest.mark.asyncio
    async def test_status_500_raises_application_error(self, service, store):
        service.fail_next = (500, "Database unavailable")

        with pytest.raises(ApplicationError) as exc_info:
            await store.fetch_all()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Database unavailable"

    @pytest.mark.asyncio
    async def test_failure_without_message_gets_default(self):
        store = _store_with(lambda request: httpx.Response(200, json={"statusCode": 503}))

        with pytest.raises(ApplicationError, match="status 503"):
            await store.fetch_all()

    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(self, service, store):
        service.offline = True

        with pytest.raises(TransportError):
            await store.fetch_all()

    @pytest.mark.asyncio
    async def test_non_json_body_raises_transport_error(self):
        store = _store_with(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

        with pytest.raises(TransportError, match="HTTP 502"):
            await store.fetch_all()

    @pytest.mark.asyncio
    async def test_malformed_record_raises_application_error(self):
        payload = {"statusCode": 200, "data": [{"script_name": "NIFTY"}]}
        store = _store_with(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(ApplicationError, match="Malformed"):
            await store.fetch_all()

    @pytest.mark.asyncio
    async def test_each_call_is_attempted_once(self, service, store):
        service.fail_next = (500, "boom")

        with pytest.raises(RemoteError):
            await store.fetch_all()

        assert len(service.requests) == 1


class TestCreate:
    """Creating posts the draft as JSON and returns the assigned identity."""

    @pytest.mark.asyncio
    async def test_create_assigns_id(self, service, store):
        draft = AlertDraft(instrument="NIFTY", category=Category.SWING, side="BUY", price=100, comment="")

        record = await store.create(draft)

        assert record.id
        assert record.instrument == "NIFTY"
        assert record.category is Category.SWING
        assert record.side == "BUY"
        assert record.price == 100.0
        assert record.id in service.alerts

    @pytest.mark.asyncio
    async def test_create_request_shape(self, service, store):
        draft = AlertDraft(instrument="INFY", category=Category.WEEKLY, side="SHORT", price=1500.5, comment="x")

        await store.create(draft)

        request = service.calls("POST")[0]
        assert request.url.path == "/stocks/alert/create"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "script_name": "INFY",
            "alert_for": 2,
            "hit_side": "SHORT",
            "price": 1500.5,
            "comment": "x",
        }

    @pytest.mark.asyncio
    async def test_rejection_message_from_error_status(self):
        def handler(request):
            return httpx.Response(400, json={"statusCode": 400, "message": "Invalid script"})

        store = _store_with(handler)
        draft = AlertDraft(instrument="NIFTY", side="BUY", price=1)

        with pytest.raises(ApplicationError, match="Invalid script"):
            await store.create(draft)


class TestUpdate:
    """Updating sends the patch to the alert's own path."""

    @pytest.mark.asyncio
    async def test_update_keeps_id(self, service, store):
        seeded = service.add(price=100)

        record = await store.update(seeded["_id"], {"price": 120.0, "comment": "raised"})

        assert record.id == seeded["_id"]
        assert record.price == 120.0
        assert service.calls("PUT")[0].url.path == f"/stocks/alert/update/{seeded['_id']}"

    @pytest.mark.asyncio
    async def test_update_without_data_returns_none(self):
        store = _store_with(lambda request: httpx.Response(200, json={"statusCode": 200, "message": "ok"}))
        assert await store.update("a1", {"price": 1.0}) is None

    @pytest.mark.asyncio
    async def test_update_with_write_summary_returns_none(self):
        payload = {"statusCode": 200, "data": {"acknowledged": True, "modifiedCount": 1}}
        store = _store_with(lambda request: httpx.Response(200, json=payload))
        assert await store.update("a1", {"price": 1.0}) is None

    @pytest.mark.asyncio
    async def test_update_missing_alert(self, store):
        with pytest.raises(ApplicationError, match="Alert not found"):
            await store.update("nope", {"price": 1.0})


class TestDelete:
    """Deleting a missing alert is an application failure."""

    @pytest.mark.asyncio
    async def test_delete(self, service, store):
        seeded = service.add()

        await store.delete(seeded["_id"])

        assert seeded["_id"] not in service.alerts
        assert service.calls("DELETE")[0].url.path == f"/stocks/alert/delete/{seeded['_id']}"

    @pytest.mark.asyncio
    async def test_delete_missing(self, store):
        with pytest.raises(ApplicationError, match="Alert not found"):
            await store.delete("nope")


class TestStoreInterface:
    """The HTTP store implements the abstract store interface."""

    def test_is_base_store(self):
        assert issubclass(RemoteAlertStore, BaseAlertStore)

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_client(self, service):
        async with service.store() as store:
            await store.fetch_all()
        assert store._client.is_closed

    def test_base_url_trailing_slash(self):
        store = RemoteAlertStore(base_url="http://alerts.test/")
        assert store.base_url == "http://alerts.test"
