"""Errors raised by session operations."""


class CoachError(Exception):
    """Base class for errors surfaced to callers of the session service."""


class ValidationError(CoachError):
    """Malformed intake or answer input, or an answer for a foreign or
    already-answered question."""


class NotFoundError(CoachError):
    """Unknown session or question."""


class ConflictError(CoachError):
    """Operation not allowed in the session's current state."""
