"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class IllegalTransitionError(ValidationError):
    """An order cannot move from its current status to the requested one."""


class InsufficientStock(ValidationError):
    """Strict stock mode: a line asks for more units than are in stock."""


# --- Coupon rejections --------------------------------------------------------


class CouponRejected(DomainException):
    """Base class for every reason a coupon code can be refused."""


class InvalidCode(CouponRejected):
    pass


class Expired(CouponRejected):
    pass


class MinimumNotMet(CouponRejected):
    def __init__(self, message: str, minimum) -> None:
        super().__init__(message)
        self.minimum = minimum


class UsageExhausted(CouponRejected):
    pass


# --- Storage ------------------------------------------------------------------


class PersistenceError(DomainException):
    """The backing store could not be read or written."""


class NetworkError(PersistenceError):
    """The backing store did not answer within the allowed time."""


class OrderCreationFailed(DomainException):
    """A submission step failed; ``step`` names which one."""

    def __init__(self, message: str, step: str) -> None:
        super().__init__(message)
        self.step = step
