"""Incremental, rate-limited poller for the arXiv Atom query API."""

__version__ = "0.1.0"
