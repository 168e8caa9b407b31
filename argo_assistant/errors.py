"""Exception types raised inside the assistant.

Only ConfigurationError is ever allowed to escape to the process: everything
else is caught at the pipeline boundary and degraded to a fallback answer.
"""


class ArgoError(Exception):
    """Base class for assistant errors."""


class ConfigurationError(ArgoError):
    """Required configuration is missing or invalid (fatal at startup)."""


class CacheError(ArgoError):
    """The answer store could not be read or written."""
