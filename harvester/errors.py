# harvester/errors.py
from httpx import HTTPStatusError, TransportError

__all__ = ["ConfigError", "ParseError", "HTTPStatusError", "TransportError"]


class ConfigError(ValueError):
    """Invalid crawl parameters (page range, worker count, timeout)."""


class ParseError(ValueError):
    """A fetched document could not be turned into a parse tree."""
