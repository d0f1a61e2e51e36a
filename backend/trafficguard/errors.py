"""
Error taxonomy for the enforcement workflow.

Every error here is recoverable: routes translate them to HTTP responses
and the worst case is a failed scan the officer retries manually.
"""


class TrafficGuardError(Exception):
    """Base class for all application errors"""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class AcquisitionError(TrafficGuardError):
    """Camera permission or hardware failure"""

    user_message = "Could not access camera. Please check permissions."


class InvalidTransitionError(TrafficGuardError):
    """Operation not allowed in the current capture state"""

    user_message = "Operation not allowed in the current capture state."


class GenAIError(TrafficGuardError):
    """Transport or HTTP failure talking to the generative AI service"""

    user_message = "AI service unavailable."


class PipelineError(TrafficGuardError):
    """Any analysis stage failure, collapsed to one operator-facing message"""

    user_message = "Scan failed. Please try again."


class DispatchError(TrafficGuardError):
    """Notification delivery failure"""

    user_message = "Failed to send notification. Network Error."


class PersistenceError(TrafficGuardError):
    """Durable storage failure (quota, corruption, unavailable database)"""

    user_message = "Could not save data locally."


class AuthenticationError(TrafficGuardError):
    """Login rejected by the officer identity policy"""

    user_message = "Login failed."


class RecordNotFoundError(TrafficGuardError):
    """No scan record with the requested id"""

    user_message = "Scan record not found."
