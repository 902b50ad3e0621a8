"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidThresholdError(DomainException):
    """Threshold list is empty or contains values outside (0, 1]"""

    pass


class InvalidTriggerKeyError(DomainException):
    """Budget id, reference month or threshold cannot be normalized into a dedup key"""

    pass


class TriggerConflictError(DomainException):
    """A concurrent writer created the same threshold trigger first"""

    pass
