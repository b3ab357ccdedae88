"""State controllers for the alert form, the alert list and the status banner."""

from alertdesk.controllers.form import AlertFormController, FormState
from alertdesk.controllers.listing import AlertListController, ListState, RowEdit
from alertdesk.controllers.notifications import NotificationScheduler, NotificationState

__all__ = [
    "AlertFormController",
    "AlertListController",
    "FormState",
    "ListState",
    "NotificationScheduler",
    "NotificationState",
    "RowEdit",
]
