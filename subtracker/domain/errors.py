"""
Error taxonomy surfaced to callers of the subscription use cases.
"""


class ValidationError(ValueError):
    """Bad input; the operation is aborted before anything is persisted."""


class NotFoundError(LookupError):
    """The operation targets a subscription (or category) that does not exist."""
