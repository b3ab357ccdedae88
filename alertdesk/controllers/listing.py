"""Alert list state: loading, inline row editing and deletion.

The list mirrors the alert service. After an update it is refetched in
full rather than patched locally, so whatever normalization the service
applies is what gets shown.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from alertdesk.controllers.notifications import NotificationScheduler
from alertdesk.errors import AlertDeskError, ValidationError, user_message
from alertdesk.models import (
    AlertRecord,
    Category,
    HitSide,
    coerce_field,
    format_price,
    parse_price,
    step_price,
)
from alertdesk.remote.base import BaseAlertStore

logger = logging.getLogger(__name__)

ListStatus = Literal["idle", "loading", "ready", "error"]
ConfirmCallback = Callable[[str], Union[bool, Awaitable[bool]]]


class RowEdit(BaseModel):
    """Editable copy of one listed alert."""

    id: str = Field(..., min_length=1, description="ID of the alert being edited")
    instrument: str = Field(..., description="Trading symbol (read-only)")
    category: Category = Field(default=Category.INTRADAY, description="Alert horizon")
    side: Optional[HitSide] = Field(default=None, description="BUY or SHORT, None when unset")
    comment: str = Field(default="", description="Free-text note")
    price: str = Field(default="", description="Price as entered")

    model_config = {"frozen": True}

    @classmethod
    def from_record(cls, record: AlertRecord) -> "RowEdit":
        """Snapshot a record, filling unset optional fields with defaults."""
        return cls(
            id=record.id,
            instrument=record.instrument,
            category=record.category if record.category is not None else Category.INTRADAY,
            side=record.side,
            comment=record.comment or "",
            price="" if record.price is None else format_price(record.price),
        )

    def with_field(self, name: str, value: Any) -> "RowEdit":
        if name == "instrument":
            raise ValidationError("The instrument of an existing alert cannot be changed")
        return self.model_copy(update={name: coerce_field(name, value, side_kind="hit_side")})

    def stepped(self, delta: int) -> "RowEdit":
        return self.model_copy(update={"price": step_price(self.price, delta)})

    def to_patch(self) -> dict:
        """Build the update body.

        Raises:
            ValidationError: If the price text is not a non-negative number.
        """
        patch = {
            "script_name": self.instrument,
            "alert_for": int(self.category),
            "comment": self.comment,
            "price": parse_price(self.price, allow_zero=True),
        }
        if self.side is not None:
            patch["hit_side"] = self.side
        return patch


class ListState(BaseModel):
    """Everything the alert list shows."""

    status: ListStatus = Field(default="idle", description="Load status")
    records: tuple[AlertRecord, ...] = Field(default=(), description="Alerts as last fetched")
    error: Optional[str] = Field(default=None, description="Why loading failed")
    editing: Optional[RowEdit] = Field(default=None, description="The one row open for edit")
    updating: bool = Field(default=False, description="An update is in flight")

    model_config = {"frozen": True}

    def loading(self) -> "ListState":
        return self.model_copy(update={"status": "loading", "error": None})

    def loaded(self, records: list[AlertRecord]) -> "ListState":
        return self.model_copy(update={"status": "ready", "records": tuple(records), "error": None})

    def failed(self, message: str) -> "ListState":
        return self.model_copy(update={"status": "error", "records": (), "error": message})

    def with_edit(self, edit: Optional[RowEdit]) -> "ListState":
        return self.model_copy(update={"editing": edit})

    def without(self, alert_id: str) -> "ListState":
        records = tuple(r for r in self.records if r.id != alert_id)
        editing = self.editing
        if editing is not None and editing.id == alert_id:
            editing = None
        return self.model_copy(update={"records": records, "editing": editing})

    def find(self, alert_id: str) -> Optional[AlertRecord]:
        for record in self.records:
            if record.id == alert_id:
                return record
        return None


class AlertListController:
    """Loads the alert list and handles edit and delete on its rows.

    Only one row can be open for edit at a time; opening another row
    replaces the slot.
    """

    def __init__(self, store: BaseAlertStore, notifier: NotificationScheduler):
        self.store = store
        self.notifier = notifier
        self._state = ListState()
        self._active = True

    @property
    def state(self) -> ListState:
        return self._state

    @property
    def records(self) -> tuple[AlertRecord, ...]:
        return self._state.records

    def dispose(self) -> None:
        """Stop applying results of requests still in flight."""
        self._active = False

    async def mount(self) -> ListState:
        """Fetch the list once.

        A failed fetch leaves the list in the error state; mounting again
        does not retry.
        """
        if self._state.status != "idle":
            return self._state

        self._state = self._state.loading()
        try:
            records = await self.store.fetch_all()
        except AlertDeskError as e:
            logger.warning("Loading alerts failed: %s", e)
            if self._active:
                self._state = self._state.failed(user_message(e, "Failed to fetch alerts"))
            return self._state

        if self._active:
            self._state = self._state.loaded(records)
        return self._state

    async def refresh(self) -> bool:
        """Refetch the whole list after a change.

        Returns:
            True if the list was reloaded. On failure the previous records
            stay and the error is shown as a notification.
        """
        try:
            records = await self.store.fetch_all()
        except AlertDeskError as e:
            if self._active:
                self.notifier.show(user_message(e, "Failed to fetch updated alerts"), "error")
            return False

        if self._active:
            self._state = self._state.loaded(records)
        return True

    def begin_edit(self, record: AlertRecord) -> RowEdit:
        """Open a row for edit, closing any other open row."""
        edit = RowEdit.from_record(record)
        self._state = self._state.with_edit(edit)
        return edit

    def edit_field(self, name: str, value: Any) -> RowEdit:
        """Change a field of the open row.

        Raises:
            ValidationError: If no row is open or the value is invalid.
        """
        edit = self._require_edit()
        edit = edit.with_field(name, value)
        self._state = self._state.with_edit(edit)
        return edit

    def increment_price(self) -> RowEdit:
        return self._step(1)

    def decrement_price(self) -> RowEdit:
        return self._step(-1)

    def _step(self, delta: int) -> RowEdit:
        edit = self._require_edit().stepped(delta)
        self._state = self._state.with_edit(edit)
        return edit

    def _require_edit(self) -> RowEdit:
        if self._state.editing is None:
            raise ValidationError("No alert is being edited")
        return self._state.editing

    def cancel_edit(self) -> None:
        """Close the open row without touching the list."""
        self._state = self._state.with_edit(None)

    async def commit_edit(self) -> bool:
        """Send the open row to the service and resync the list.

        Returns:
            True on success. On failure the row stays open with its values
            and the error is shown as a notification.
        """
        edit = self._state.editing
        if edit is None or self._state.updating:
            return False

        try:
            patch = edit.to_patch()
        except ValidationError as e:
            self.notifier.show(str(e), "error")
            return False

        self._state = self._state.model_copy(update={"updating": True})
        try:
            await self.store.update(edit.id, patch)
        except AlertDeskError as e:
            logger.warning("Updating alert %s failed: %s", edit.id, e)
            if self._active:
                self.notifier.show(user_message(e, "Error updating alert"), "error")
            return False
        finally:
            if self._active:
                self._state = self._state.model_copy(update={"updating": False})

        if not self._active:
            return True

        current = self._state.editing
        if current is not None and current.id == edit.id:
            self._state = self._state.with_edit(None)
        self.notifier.show("Alert updated successfully!", "success")
        await self.refresh()
        return True

    async def remove(self, alert_id: str, confirm: ConfirmCallback) -> bool:
        """Delete an alert once the user confirms.

        Args:
            alert_id: ID of the alert to delete.
            confirm: Asked with the ID before anything is sent; may be a
                coroutine function. Returning False aborts.

        Returns:
            True if the alert was deleted.
        """
        approved = confirm(alert_id)
        if inspect.isawaitable(approved):
            approved = await approved
        if not approved:
            logger.debug("Delete of %s not confirmed", alert_id)
            return False

        try:
            await self.store.delete(alert_id)
        except AlertDeskError as e:
            logger.warning("Deleting alert %s failed: %s", alert_id, e)
            if self._active:
                self.notifier.show(user_message(e, "Error deleting alert"), "error")
            return False

        if self._active:
            self._state = self._state.without(alert_id)
            self.notifier.show("Alert deleted.", "success")
        return True
