"""Failure taxonomy surfaced to callers of the flight finder pipeline.

Every operation ends in success or exactly one of ConfigurationError,
ServiceUnavailable or MalformedResponse. Each carries a human-readable
``user_message`` that callers can show as-is.
"""

from typing import Literal, Optional


Operation = Literal["search", "itinerary"]


class TransportError(Exception):
    """A call to the model service could not be completed.

    Raised by transports in place of SDK or network exceptions so that the
    classification below stays independent of any particular client library.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class FlightFinderError(Exception):
    kind: str = "error"
    http_status: int = 500

    def __init__(self, user_message: str, detail: Optional[str] = None):
        super().__init__(user_message)
        self.user_message = user_message
        self.detail = detail


class ConfigurationError(FlightFinderError):
    kind = "configuration_error"
    http_status = 500


class ServiceUnavailable(FlightFinderError):
    kind = "service_unavailable"
    http_status = 503


class MalformedResponse(FlightFinderError):
    kind = "malformed_response"
    http_status = 502


MISSING_CREDENTIAL_MESSAGE = (
    "The AI service is not configured. Please ensure the API key is set up "
    "correctly in the deployment environment."
)
REJECTED_CREDENTIAL_MESSAGE = (
    "The AI service rejected the configured API key. Please check the key "
    "and try again."
)

# 401/403 mean the credential itself is wrong, not that the service is down
_CREDENTIAL_STATUSES = (401, 403)


def service_unavailable_message(operation: Operation, subject: Optional[str] = None) -> str:
    if operation == "itinerary" and subject:
        return f"Failed to generate an itinerary for {subject}. Please try again."
    if operation == "itinerary":
        return "Failed to generate an itinerary. Please try again."
    return "Failed to fetch flight information. Please try again later."


def classify_transport_failure(
    failure: TransportError,
    operation: Operation,
    subject: Optional[str] = None,
) -> FlightFinderError:
    """Map a transport failure onto the user-facing taxonomy.

    Pure function: no I/O, no logging. Quota exhaustion (429), server errors
    and network failures without a status all become ServiceUnavailable.
    """
    if failure.status in _CREDENTIAL_STATUSES:
        return ConfigurationError(REJECTED_CREDENTIAL_MESSAGE, detail=failure.message)
    return ServiceUnavailable(
        service_unavailable_message(operation, subject),
        detail=failure.message,
    )
