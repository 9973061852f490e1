"""
Error types for the galaxy field core.

Every failure the generator or lifecycle controller can raise derives from
GalaxyFieldError and also from the closest builtin, so callers can catch
either ValueError / MemoryError / RuntimeError or the specific type.
"""


class GalaxyFieldError(Exception):
    """Base class for galaxy field errors."""


class ValidationError(GalaxyFieldError, ValueError):
    """A parameter is outside its legal range."""

    def __init__(self, field, value, message):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"{field}={value!r}: {message}")


class ResourceExhaustion(GalaxyFieldError, MemoryError):
    """Buffers for the requested particle count could not be allocated."""

    def __init__(self, count):
        self.count = count
        super().__init__(f"could not allocate buffers for {count:,} particles")


class StateError(GalaxyFieldError, RuntimeError):
    """An operation was attempted in a state that does not allow it."""
