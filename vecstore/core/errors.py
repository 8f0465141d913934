"""
Error types raised by the collection layer.

Storage failures are not wrapped: sqlite3.Error propagates as raised.
"""


class VectorStoreError(Exception):
    """Base class for vecstore errors."""


class ConfigurationError(VectorStoreError):
    """Record type or collection setup is unusable (missing key, missing generator, ...)."""


class UnsupportedInputTypeError(ConfigurationError):
    """A search value of a type that cannot be turned into a query vector."""


class TypeCoercionError(VectorStoreError, TypeError):
    """A stored value could not be converted to the field's declared type."""


class OperationCancelledError(VectorStoreError):
    """The caller's cancel event was set while an operation was running."""


def raise_if_cancelled(cancel_event) -> None:
    """Raise OperationCancelledError when the given threading.Event is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Operation cancelled")
