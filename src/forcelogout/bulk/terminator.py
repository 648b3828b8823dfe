"""Per-user session termination.

Soft mode revokes refresh tokens. Hard mode disables the account (which
invalidates every issued token at once), revokes, and re-enables it.
"""

import asyncio
import logging
import time
from typing import Optional

from ..exceptions import RemoteError, SequenceInconsistencyError
from ..identity.base import IdentityService, UserIdentity
from .results import LogoutMode, UserOutcome
from .retry import RetryHandler

logger = logging.getLogger(__name__)


class SessionTerminator:
    """Runs the logout sequence for one user and reports a UserOutcome.

    ``terminate`` never raises; every failure becomes a failed outcome.
    """

    def __init__(
        self,
        identity: IdentityService,
        mode: LogoutMode,
        retry_handler: Optional[RetryHandler] = None,
        pacing_delay: float = 0.0,
    ):
        """Initialize session terminator.

        Args:
            identity: Identity provider adapter
            mode: Soft or hard logout
            retry_handler: Retry policy for the disable/re-enable calls
            pacing_delay: Seconds to wait before a soft-mode revoke
        """
        self.identity = identity
        self.mode = mode
        self.retry_handler = retry_handler or RetryHandler()
        self.pacing_delay = pacing_delay

    async def terminate(self, user: UserIdentity) -> UserOutcome:
        """Log out a single user.

        Args:
            user: User to log out

        Returns:
            UserOutcome with status success or failed
        """
        start = time.monotonic()
        try:
            if self.mode == LogoutMode.HARD:
                error = await self._hard_logout(user.id)
            else:
                error = await self._soft_logout(user.id)
        except Exception as e:
            logger.error("Unexpected error logging out user %s: %s", user.id, e, exc_info=True)
            error = e

        elapsed = time.monotonic() - start
        if error is None:
            return UserOutcome.success(user.id, email=user.email, processing_time=elapsed)

        return UserOutcome.failed(
            user.id,
            str(error),
            email=user.email,
            account_left_disabled=isinstance(error, SequenceInconsistencyError),
            quota_exceeded=isinstance(error, RemoteError) and error.is_quota_error,
            processing_time=elapsed,
        )

    async def _soft_logout(self, user_id: str) -> Optional[Exception]:
        if self.pacing_delay > 0:
            await asyncio.sleep(self.pacing_delay)
        try:
            await self.identity.revoke_sessions(user_id)
        except Exception as e:
            return e
        return None

    async def _hard_logout(self, user_id: str) -> Optional[Exception]:
        # Disabling invalidates all access and refresh tokens immediately.
        try:
            await self.retry_handler.execute_with_retry(self.identity.set_disabled, user_id, True)
        except Exception as e:
            # The account was never disabled, so there is nothing to undo.
            return e

        revoke_error: Optional[Exception] = None
        try:
            await self.identity.revoke_sessions(user_id)
        except Exception as e:
            logger.debug("Revoke failed for disabled user %s, re-enabling anyway: %s", user_id, e)
            revoke_error = e

        try:
            await self.retry_handler.execute_with_retry(self.identity.set_disabled, user_id, False)
        except Exception as e:
            logger.error("User %s left disabled after re-enable failed: %s", user_id, e)
            return SequenceInconsistencyError(user_id, e, revoke_error=revoke_error)

        return revoke_error
