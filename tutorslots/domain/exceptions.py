"""
Domain-specific exception hierarchy for the tutorslots application.
"""


class TutorSlotsError(Exception):
    """Base class for all application-level errors."""


class EditError(TutorSlotsError):
    """Base class for rejected user input; the availability is left untouched."""


class InvalidTimeFormat(EditError):
    """Raised when a time string is not a zero-padded 24-hour HH:MM value."""


class InvalidRange(EditError):
    """Raised when a range does not start before it ends."""


class StaleRange(EditError):
    """Raised when an edit targets a range that is no longer present."""


class UnknownDay(EditError):
    """Raised when a day name is outside the configured week."""


class InvalidChangeRequest(EditError):
    """Raised when a schedule change request is incomplete."""


class RoundTripViolation(TutorSlotsError):
    """Raised when slot/range conversion loses or alters information."""


class GatewayError(TutorSlotsError):
    """Raised when availability data cannot be fetched, stored or parsed."""


class AuthenticationError(TutorSlotsError):
    """Raised when the API rejects the stored token or no token is available."""
