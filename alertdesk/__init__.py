"""AlertDesk - manage stock price alerts stored on a remote alert service."""

__version__ = "0.1.0"
