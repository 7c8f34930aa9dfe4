"""Custom exceptions. Everything the application raises on purpose derives from GameError."""


class GameError(Exception):
    """Top-level exception for anything going wrong in the game (request/configuration side)."""


class InvalidRequestError(GameError):
    """Incoming request (settings form, square activation) has invalid data."""


class ConfigurationError(GameError):
    """Configuration value outside of what the application can work with."""


class SearchError(GameError):
    """The search for a computer move could not be performed."""
