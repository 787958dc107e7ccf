"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UnsupportedPeriodError(DomainException):
    """Period kind is not WEEKLY or MONTHLY"""

    pass


class InvalidAmountError(DomainException):
    """Monetary amount is zero or negative where a positive value is required"""

    pass


class InvalidRangeError(DomainException):
    """Custom date range ends before it starts"""

    pass
