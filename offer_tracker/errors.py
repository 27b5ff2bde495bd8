# offer_tracker/errors.py
"""Error taxonomy of the tracker engine.

State-machine and validation errors propagate to the HTTP layer.
`UpstreamError` and `PersistenceError` are raised and caught inside the
I/O boundary modules and never reach a caller of the tracker service.
"""


class TrackerError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(TrackerError):
    """A required tracker field is missing or empty."""


class NotFoundError(TrackerError):
    """No tracker with the given id exists."""


class AlreadyActiveError(TrackerError):
    """The tracker has already been confirmed."""


class NotPendingError(TrackerError):
    """The operation requires a tracker awaiting confirmation."""


class InvalidCodeError(TrackerError):
    """The submitted confirmation code does not match the stored one."""


class UpstreamError(TrackerError):
    """The marketplace or location directory call failed."""


class PersistenceError(TrackerError):
    """Writing or reading the durable snapshot failed."""
