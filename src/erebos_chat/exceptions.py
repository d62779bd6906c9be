"""Exceptions raised by erebos-chat."""


class ErebosError(Exception):
    """Base class for erebos-chat errors."""


class GenerationAborted(ErebosError):
    """Raised by a generator that stopped because its cancel token fired.

    The controller treats this as a user cancellation, never as a failure.
    """

    def __init__(self, message: str = "Aborted"):
        super().__init__(message)


class StorageError(ErebosError):
    """A document could not be written to the storage backend."""
