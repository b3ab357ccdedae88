"""Alert store implementations for AlertDesk."""

from alertdesk.remote.base import BaseAlertStore
from alertdesk.remote.http import RemoteAlertStore

__all__ = [
    "BaseAlertStore",
    "RemoteAlertStore",
]
