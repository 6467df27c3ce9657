"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCardConfigError(DomainException):
    """Card configuration breaks an invariant (e.g. two overrides for one month)"""

    pass


class DeliveryError(DomainException):
    """Notification delivery webhook is unavailable or rejected the request"""

    pass
