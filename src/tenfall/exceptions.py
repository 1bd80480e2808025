"""Exception hierarchy for the tenfall engine."""


class TenfallError(Exception):
    """Base exception for engine failures."""


class ConfigError(TenfallError):
    """Raised when a game configuration is missing values or inconsistent."""


class BoardNotFoundError(TenfallError):
    """Raised when a board operation runs against a world without a Board."""
