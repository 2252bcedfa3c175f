"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the handlers registered in
``sarthi.main`` render them as ``{"error": message}``.
"""
from typing import Optional


class SarthiError(Exception):
    """Base class for all caller-visible errors"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SarthiError):
    status_code = 400
    default_message = "Validation error"


class NotFound(SarthiError):
    status_code = 404
    default_message = "Not found"


class Forbidden(SarthiError):
    status_code = 403
    default_message = "Access denied"


class CapacityError(SarthiError):
    status_code = 400
    default_message = "Meeting is full"


class DuplicateRegistration(SarthiError):
    status_code = 400
    default_message = "You are already registered for this meeting"


class Unregistered(SarthiError):
    status_code = 400
    default_message = "You must register for this meeting before joining"


class NotLive(SarthiError):
    status_code = 400
    default_message = "Meeting is not live yet or has ended"


class AlreadyJoined(SarthiError):
    status_code = 400
    default_message = "You have already joined this meeting"


class InvalidTransition(SarthiError):
    status_code = 400
    default_message = "Invalid meeting status transition"


class AIServiceUnavailable(SarthiError):
    status_code = 503
    default_message = "AI service not configured"


class AIServiceError(SarthiError):
    status_code = 502
    default_message = "AI service request failed"
