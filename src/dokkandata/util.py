"""Common utilities and exception classes."""


class DokkandataError(Exception):
    """Base exception for dokkandata."""


class FetchError(DokkandataError):
    """HTTP fetch failure after retries."""


class ParseError(DokkandataError):
    """HTML parse failure."""
