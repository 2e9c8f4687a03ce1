#!/usr/bin/env python3

"""Error taxonomy for family tree operations.

Every error here is recoverable: the operation that raised it leaves the
in-memory tree exactly as it was before the call.
"""


class TreeError(Exception):
    """Base exception for family tree operations."""

    default_error_code = "UNKNOWN_ERROR"

    def __init__(self, message: str, error_code: str = None, recovery_suggestion: str = None):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.recovery_suggestion = recovery_suggestion
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary format."""
        result = {
            "error": self.message,
            "error_code": self.error_code
        }
        if self.recovery_suggestion:
            result["recovery_suggestion"] = self.recovery_suggestion
        return result


class InvalidInput(TreeError):
    """A user supplied field is empty or malformed."""
    default_error_code = "INVALID_INPUT"


class DuplicateMember(TreeError):
    default_error_code = "DUPLICATE_MEMBER"


class MemberNotFound(TreeError):
    default_error_code = "MEMBER_NOT_FOUND"


class CannotRemoveRoot(TreeError):
    default_error_code = "CANNOT_REMOVE_ROOT"


class CorruptData(TreeError):
    """Persisted bytes could not be turned back into a consistent tree."""
    default_error_code = "CORRUPT_DATA"


class StoreIOError(TreeError):
    default_error_code = "STORE_IO_ERROR"


class StoreNotFound(TreeError):
    default_error_code = "STORE_NOT_FOUND"
