"""
Exception hierarchy for the policy export pipeline.

PolicyListingError is the only fatal failure; PolicyFetchError (and its
EmptyVersionIdError subclass) marks a single policy as skipped.
"""

from typing import Optional


class PolicyExportError(Exception):
    """Base class for every error raised by policy_export."""
    pass


class PolicyListingError(PolicyExportError):
    """Raised when the managed policy listing cannot be retrieved. Aborts the run."""
    pass


class PolicyFetchError(PolicyExportError):
    """Raised when a single policy's version id or document cannot be retrieved."""

    def __init__(self, message: str, arn: Optional[str] = None):
        super().__init__(message)
        self.arn = arn


class EmptyVersionIdError(PolicyFetchError):
    """get_policy succeeded but reported no default version id."""
    pass
