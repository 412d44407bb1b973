"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidTransitionError(ValidationError):
    """An order status change is not permitted from the current state."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class NotAuthenticatedError(DomainException):
    """The operation needs a signed-in customer."""


class PickupVerificationError(DomainException):
    """Base class for local pickup code verification failures."""


class NotLocalPickupError(PickupVerificationError):
    """The order is shipped, not collected in person."""


class AlreadyPickedUpError(PickupVerificationError):
    """The order has already been collected."""


class InvalidPickupCodeError(PickupVerificationError):
    """The supplied code does not match the order's confirmation code."""


class PersistenceUnavailableError(DomainException):
    """A storage backend could not complete a read or write."""


class MalformedStoredDataError(DomainException):
    """Locally cached data could not be decoded."""
