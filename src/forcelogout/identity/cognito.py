"""Amazon Cognito user pool adapter built on boto3."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import RemoteError, UserNotFoundError
from .base import IdentityService, UserIdentity, UserPage

logger = logging.getLogger(__name__)

# ListUsers accepts at most 60 users per page.
MAX_PAGE_SIZE = 60


def _attributes_to_dict(attributes: List[Dict[str, str]]) -> Dict[str, str]:
    return {attr["Name"]: attr.get("Value", "") for attr in attributes or []}


def _to_identity(user: Dict[str, Any]) -> UserIdentity:
    attributes = _attributes_to_dict(user.get("Attributes") or user.get("UserAttributes") or [])
    return UserIdentity(
        id=user["Username"],
        email=attributes.get("email"),
        disabled=not user.get("Enabled", True),
        display_name=attributes.get("name"),
    )


class CognitoIdentityService(IdentityService):
    """Identity service backed by a Cognito user pool.

    The Cognito username is used as the user ID. Revoking sessions is done
    with a global sign-out, which invalidates every refresh token issued to
    the user.
    """

    def __init__(self, user_pool_id: str, region: str = "us-east-1", client: Any = None):
        """Initialize the Cognito identity service.

        Args:
            user_pool_id: Cognito user pool ID
            region: AWS region of the user pool
            client: Optional pre-built ``cognito-idp`` client
        """
        self.user_pool_id = user_pool_id
        self.region = region
        self.client = client or boto3.client("cognito-idp", region_name=region)

    async def _call(
        self, operation: str, user_id: Optional[str] = None, **kwargs
    ) -> Dict[str, Any]:
        func: Callable = getattr(self.client, operation)
        try:
            return await asyncio.to_thread(func, UserPoolId=self.user_pool_id, **kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "")
            message = error.get("Message", str(e))
            if code == "UserNotFoundException":
                raise UserNotFoundError(user_id or "unknown", message) from e
            raise RemoteError(
                f"{code}: {message}" if code else message,
                code=code or None,
                user_id=user_id,
                context={"operation": operation},
            ) from e
        except BotoCoreError as e:
            raise RemoteError(str(e), user_id=user_id, context={"operation": operation}) from e

    async def list_users_page(
        self, max_results: int, page_token: Optional[str] = None
    ) -> UserPage:
        params: Dict[str, Any] = {"Limit": min(max_results, MAX_PAGE_SIZE)}
        if page_token:
            params["PaginationToken"] = page_token

        response = await self._call("list_users", **params)
        return UserPage(
            users=[_to_identity(user) for user in response.get("Users", [])],
            next_page_token=response.get("PaginationToken"),
        )

    async def revoke_sessions(self, user_id: str) -> None:
        await self._call("admin_user_global_sign_out", user_id=user_id, Username=user_id)

    async def set_disabled(self, user_id: str, disabled: bool) -> None:
        operation = "admin_disable_user" if disabled else "admin_enable_user"
        await self._call(operation, user_id=user_id, Username=user_id)

    async def get_user(self, user_id: str) -> UserIdentity:
        response = await self._call("admin_get_user", user_id=user_id, Username=user_id)
        return _to_identity(response)
