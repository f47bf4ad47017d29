"""Domain layer errors.

Invite declines (expired, used up, self-referral, ...) are not errors; they
are returned as results with a reason. The exceptions here cover callers
that must sign in and infrastructure that failed.
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class UnauthenticatedError(DomainError):
    """Raised when an operation needs a signed-in user and none was given."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class StoreError(DomainError):
    """Raised by repositories when the backing store cannot answer.

    Covers unreachable databases, timeouts and driver errors. Safe to retry.
    """

    pass


class ValidationError(DomainError):
    """Invite validation could not complete because the store failed.

    Distinct from an invalid code: callers respond with a server error.
    """

    def __init__(self, code_prefix: str):
        self.code_prefix = code_prefix
        super().__init__(f"Failed to validate invite code {code_prefix}")


class ConsumeError(DomainError):
    """Invite consumption could not complete because the store failed.

    Nothing was recorded; the attempt is safe to retry.
    """

    def __init__(self, code_prefix: str):
        self.code_prefix = code_prefix
        super().__init__(f"Failed to consume invite code {code_prefix}")


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
