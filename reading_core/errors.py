"""Error taxonomy shared by the capture engine, the client and the API."""
from __future__ import annotations


class RemedialError(Exception):
    """Base class for every error raised by the remedial reading stack.

    ``message`` is safe to show to a student or teacher.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(RemedialError):
    """Malformed or incomplete request payload."""


class NotFoundError(RemedialError):
    """A referenced record (approved schedule, session) does not exist."""


class DeviceError(RemedialError):
    """Microphone or speech service unavailable, denied or failed."""


class EmptyResultError(RemedialError):
    """The recognizer finished without any transcript."""


class PersistenceError(RemedialError):
    """A storage write failed and the transaction was rolled back."""
