"""gitindex: concurrent git index/status reconciliation engine."""

__version__ = "0.1.0"
