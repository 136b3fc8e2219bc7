"""Exceptions raised by progress-fit."""


class ProgressError(Exception):
    """Base class for all progress-fit errors."""


class ValidationError(ProgressError, ValueError):
    """A mutation was given a value outside its allowed range."""


class PersistenceError(ProgressError):
    """The store failed to save, load or delete an entity.

    Services undo the in-memory mutation before re-raising, so the caller
    can retry the same operation.
    """


class NotFoundError(ProgressError, LookupError):
    """No entity exists with the requested id."""


def require_non_negative(name: str, value: float | None) -> None:
    """Raise ValidationError if value is set and negative."""
    if value is not None and value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")


def require_in_range(name: str, value: float | None, low: float, high: float) -> None:
    """Raise ValidationError if value is set and outside [low, high]."""
    if value is not None and not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}, got {value}")


def require_whole_number(name: str, value: float | None) -> None:
    """Raise ValidationError if value is set and has a fractional part."""
    if value is not None and (isinstance(value, bool) or value != int(value)):
        raise ValidationError(f"{name} must be a whole number, got {value}")
