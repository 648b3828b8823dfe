"""Firebase Authentication adapter built on the firebase-admin SDK."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from ..exceptions import RemoteError, UserNotFoundError
from .base import IdentityService, UserIdentity, UserPage, timestamp_ms_to_datetime

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "[DEFAULT]"

# firebase-admin refuses page sizes above this.
MAX_PAGE_SIZE = 1000


def initialize_firebase(
    credentials_file: Optional[Union[str, Path]] = None,
    app_name: str = DEFAULT_APP_NAME,
) -> firebase_admin.App:
    """Initialize the Firebase Admin SDK once and return the app.

    Uses the service account key file when it exists, otherwise falls back to
    application default credentials.

    Args:
        credentials_file: Path to a service account JSON key
        app_name: Firebase app name

    Returns:
        The initialized firebase_admin.App
    """
    try:
        return firebase_admin.get_app(app_name)
    except ValueError:
        pass

    if credentials_file and Path(credentials_file).exists():
        credential = credentials.Certificate(str(credentials_file))
        app = firebase_admin.initialize_app(credential, name=app_name)
        logger.info("Firebase Admin initialized with service account key %s", credentials_file)
    else:
        credential = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(credential, name=app_name)
        logger.info("Firebase Admin initialized with application default credentials")
    return app


def _to_identity(record: Any) -> UserIdentity:
    metadata = getattr(record, "user_metadata", None)
    return UserIdentity(
        id=record.uid,
        email=record.email,
        disabled=bool(record.disabled),
        last_sign_in=timestamp_ms_to_datetime(
            getattr(metadata, "last_sign_in_timestamp", None) if metadata else None
        ),
        display_name=getattr(record, "display_name", None),
        tokens_valid_after=timestamp_ms_to_datetime(
            getattr(record, "tokens_valid_after_timestamp", None)
        ),
    )


class FirebaseIdentityService(IdentityService):
    """Identity service backed by Firebase Authentication.

    The SDK is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self.app = app

    async def _call(
        self, operation: str, func: Callable, *args, user_id: Optional[str] = None, **kwargs
    ):
        try:
            return await asyncio.to_thread(func, *args, app=self.app, **kwargs)
        except auth.UserNotFoundError as e:
            raise UserNotFoundError(user_id or "unknown", str(e)) from e
        except FirebaseError as e:
            raise RemoteError(
                str(e), code=e.code, user_id=user_id, context={"operation": operation}
            ) from e
        except ValueError as e:
            # Raised by the SDK for malformed uids and arguments.
            raise RemoteError(
                str(e), code="INVALID_ARGUMENT", user_id=user_id, context={"operation": operation}
            ) from e

    async def list_users_page(
        self, max_results: int, page_token: Optional[str] = None
    ) -> UserPage:
        page = await self._call(
            "list_users",
            auth.list_users,
            page_token=page_token,
            max_results=min(max_results, MAX_PAGE_SIZE),
        )
        return UserPage(
            users=[_to_identity(record) for record in page.users],
            next_page_token=page.next_page_token,
        )

    async def revoke_sessions(self, user_id: str) -> None:
        await self._call(
            "revoke_refresh_tokens", auth.revoke_refresh_tokens, user_id, user_id=user_id
        )

    async def set_disabled(self, user_id: str, disabled: bool) -> None:
        await self._call(
            "update_user", auth.update_user, user_id, disabled=disabled, user_id=user_id
        )

    async def get_user(self, user_id: str) -> UserIdentity:
        record = await self._call("get_user", auth.get_user, user_id, user_id=user_id)
        return _to_identity(record)
