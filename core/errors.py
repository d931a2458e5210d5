"""
Error taxonomy for the waitlist service
"""


class WaitlistError(Exception):
    """Base class for errors raised by the waitlist service"""


class ValidationError(WaitlistError):
    """Required input missing or blank (client's fault, HTTP 400)"""


class StorageError(WaitlistError):
    """Store read/write failure (HTTP 500)"""


class NotificationError(WaitlistError):
    """Best-effort notification failure. Logged only, never surfaced to the caller"""
