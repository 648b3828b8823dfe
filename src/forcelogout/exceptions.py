"""Custom exception classes for forced logout operations."""

from typing import Any, Dict, Optional

# Provider error codes that indicate a rate limit or quota ceiling was hit.
QUOTA_ERROR_CODES = {
    "QUOTA_EXCEEDED",
    "RESOURCE_EXHAUSTED",
    "TooManyRequestsException",
    "LimitExceededException",
    "ThrottlingException",
    "Throttling",
}


class ForceLogoutError(Exception):
    """Base exception for forced logout operations."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize forced logout error.

        Args:
            message: Error message
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RemoteError(ForceLogoutError):
    """Exception raised when a call to the identity provider fails."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        user_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize remote error.

        Args:
            message: Error message reported by the provider
            code: Provider specific error code, if known
            user_id: User the failing call was about, if any
            context: Additional context information
        """
        super().__init__(message, context=context)
        self.code = code
        self.user_id = user_id

    @property
    def is_quota_error(self) -> bool:
        """Whether the provider rejected the call because of a quota or rate limit."""
        if self.code and self.code in QUOTA_ERROR_CODES:
            return True
        return "quota" in self.message.lower()


class UserNotFoundError(RemoteError):
    """Exception raised when the identity provider has no such user."""

    def __init__(self, user_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"User {user_id} not found",
            code="USER_NOT_FOUND",
            user_id=user_id,
        )


class SequenceInconsistencyError(RemoteError):
    """Exception raised when a hard logout could not re-enable the account.

    The user's tokens were revoked by the disable step, but the account is
    still disabled and needs manual remediation.
    """

    def __init__(
        self,
        user_id: str,
        enable_error: Exception,
        revoke_error: Optional[Exception] = None,
    ):
        """Initialize sequence inconsistency error.

        Args:
            user_id: User left disabled
            enable_error: Last error raised by the re-enable step
            revoke_error: Error raised by the revoke step, if it failed too
        """
        message = f"Account {user_id} left disabled: re-enable failed: {enable_error}"
        if revoke_error is not None:
            message = f"Revoke failed ({revoke_error}); {message}"

        super().__init__(
            message,
            code="ACCOUNT_LEFT_DISABLED",
            user_id=user_id,
            context={"revoke_failed": revoke_error is not None},
        )
        self.enable_error = enable_error
        self.revoke_error = revoke_error


class FatalPagingError(ForceLogoutError):
    """Exception raised when listing the user pool fails and the run is aborted."""

    def __init__(self, message: str, page_number: int = 0, partial_report: Any = None):
        """Initialize fatal paging error.

        Args:
            message: Error message
            page_number: Zero-based index of the page that could not be fetched
            partial_report: RunReport covering the work queued before the failure
        """
        super().__init__(message, context={"page_number": page_number})
        self.page_number = page_number
        self.partial_report = partial_report


class ConfigurationError(ForceLogoutError):
    """Exception raised when configuration is missing or invalid."""
