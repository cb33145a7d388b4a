class BracketError(Exception):
    """Base class for errors raised by tournament operations."""


class TournamentValidationError(BracketError, ValueError):
    """Invalid input or an operation the tournament's state does not allow."""


class NotFoundError(BracketError, LookupError):
    """Unknown tournament, match or participant identifier."""
