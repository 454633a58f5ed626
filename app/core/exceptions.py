"""Domain errors for check-in, events and the realtime pipeline.

Endpoint handlers translate ``AttendanceError`` subclasses into HTTP responses
using ``status_code`` and ``message``. ``CacheUnavailable`` and
``BroadcastPushFailure`` are absorbed by the layers that raise them and never
reach a client.
"""


class AttendanceError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 400
    message = "Request could not be processed"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidToken(AttendanceError):
    status_code = 400
    message = "Invalid or expired QR code"


class TokenEventMismatch(AttendanceError):
    status_code = 400
    message = "QR code does not match the event"


class EventNotActive(AttendanceError):
    status_code = 404
    message = "Event not found or no longer active"


class AlreadyCheckedIn(AttendanceError):
    status_code = 400
    message = "You are already checked in to this event"


class EventNotFound(AttendanceError):
    status_code = 404
    message = "Event not found"


class UserNotFound(AttendanceError):
    status_code = 404
    message = "User not found"


class PermissionDenied(AttendanceError):
    status_code = 403
    message = "You do not have permission to perform this action"


class CacheUnavailable(Exception):
    """The cache backend could not be reached."""


class BroadcastPushFailure(Exception):
    """A frame could not be delivered to a live-view subscriber."""


class QREncodingError(Exception):
    """The payload could not be rendered as a QR image."""
