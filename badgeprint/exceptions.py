# exceptions.py


class BadgeError(Exception):
    """Base class for errors raised by the card engine."""


class UnknownElementError(BadgeError, KeyError):
    """A side, field id or layer kind that the template does not have."""


class ImageLoadError(BadgeError):
    """An image reference could not be fetched or decoded."""

    def __init__(self, ref: str, reason: str = ''):
        self.ref = ref
        self.reason = reason
        short = ref if len(ref) <= 80 else ref[:77] + '...'
        super().__init__(f"Could not load image '{short}': {reason}" if reason else f"Could not load image '{short}'")


class ValidationError(BadgeError):
    """An export or save precondition is not met. The action must not proceed."""


class PersistenceError(BadgeError):
    """A store could not be read or written."""
