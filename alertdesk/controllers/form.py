"""Form for authoring a new alert or editing an existing one."""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from alertdesk.controllers.listing import AlertListController
from alertdesk.controllers.notifications import NotificationScheduler
from alertdesk.errors import AlertDeskError, ValidationError, user_message
from alertdesk.models import (
    AlertDraft,
    AlertRecord,
    Category,
    Direction,
    coerce_field,
    direction_to_hit_side,
    format_price,
    hit_side_to_direction,
    parse_price,
    step_price,
)
from alertdesk.remote.base import BaseAlertStore

logger = logging.getLogger(__name__)


class FormState(BaseModel):
    """Values currently in the alert form."""

    instrument: str = Field(default="", description="Selected symbol")
    price: str = Field(default="0", description="Price as entered")
    direction: Direction = Field(default="ABOVE", description="Threshold direction")
    comment: str = Field(default="", description="Free-text note")
    category: Category = Field(default=Category.SWING, description="Alert horizon")
    editing_target_id: Optional[str] = Field(default=None, description="Alert being edited, None when authoring")
    submitting: bool = Field(default=False, description="A submit is in flight")

    model_config = {"frozen": True}

    @classmethod
    def from_record(cls, record: AlertRecord) -> "FormState":
        """Form values for editing an existing alert."""
        return cls(
            instrument=record.instrument,
            price="" if record.price is None else format_price(record.price),
            direction=hit_side_to_direction(record.side) or "ABOVE",
            comment=record.comment,
            category=record.category if record.category is not None else Category.SWING,
            editing_target_id=record.id,
        )

    def with_field(self, name: str, value: Any) -> "FormState":
        # The form calls the side a direction
        if name == "direction":
            name = "side"
        key = "direction" if name == "side" else name
        return self.model_copy(update={key: coerce_field(name, value, side_kind="direction")})

    def stepped(self, delta: int) -> "FormState":
        return self.model_copy(update={"price": step_price(self.price, delta)})

    def to_draft(self) -> AlertDraft:
        """Validate the form into a draft.

        Raises:
            ValidationError: If no instrument is selected or the price is
                missing, zero, negative or not a number.
        """
        if not self.instrument:
            raise ValidationError("Select an instrument")
        price = parse_price(self.price)
        return AlertDraft(
            instrument=self.instrument,
            category=self.category,
            side=direction_to_hit_side(self.direction),
            price=price,
            comment=self.comment,
        )


class AlertFormController:
    """Drives the alert form.

    Submitting creates the alert when authoring and updates it through
    the service when editing; either way the attached list is resynced.
    """

    def __init__(
        self,
        store: BaseAlertStore,
        notifier: NotificationScheduler,
        list_controller: Optional[AlertListController] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.list_controller = list_controller
        self._state = FormState()
        self._active = True

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def editing(self) -> bool:
        return self._state.editing_target_id is not None

    def dispose(self) -> None:
        """Stop applying results of requests still in flight."""
        self._active = False

    def set_field(self, name: str, value: Any) -> FormState:
        """Set one field.

        Raises:
            ValidationError: If the field is unknown or the value invalid.
        """
        self._state = self._state.with_field(name, value)
        return self._state

    def increment_price(self) -> FormState:
        self._state = self._state.stepped(1)
        return self._state

    def decrement_price(self) -> FormState:
        self._state = self._state.stepped(-1)
        return self._state

    def load(self, record: AlertRecord) -> FormState:
        """Switch to editing an existing alert."""
        self._state = FormState.from_record(record)
        return self._state

    def cancel(self) -> FormState:
        """Leave edit mode and clear the form."""
        self._state = FormState()
        return self._state

    async def submit(self) -> Optional[AlertRecord]:
        """Validate and persist the form.

        Never raises for validation or service failures; they are shown as
        an error notification and the form keeps its values.

        Returns:
            The persisted record, or None if nothing was saved.
        """
        if self._state.submitting:
            return None

        try:
            draft = self._state.to_draft()
        except ValidationError as e:
            self.notifier.show(str(e), "error")
            return None

        target_id = self._state.editing_target_id
        action = "create" if target_id is None else "update"
        self._state = self._state.model_copy(update={"submitting": True})

        try:
            if target_id is None:
                record = await self.store.create(draft)
            else:
                record = await self.store.update(target_id, draft.to_wire())
                if record is None:
                    record = AlertRecord(id=target_id, **draft.model_dump())
        except AlertDeskError as e:
            logger.warning("Failed to %s alert: %s", action, e)
            if self._active:
                self.notifier.show(f"Failed to {action} alert: {user_message(e, 'request failed')}", "error")
            return None
        finally:
            if self._active:
                self._state = self._state.model_copy(update={"submitting": False})

        if not self._active:
            return record

        self._state = FormState()
        self.notifier.show(f"Alert {action}d successfully!", "success")
        if self.list_controller is not None and self.list_controller.state.status == "ready":
            await self.list_controller.refresh()
        return record
