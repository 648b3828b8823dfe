"""Identity provider adapters.

The logout engine talks to providers only through :class:`IdentityService`.
The concrete adapters import their SDKs lazily via :func:`create_identity_service`
so that installing one SDK is enough to use its provider.
"""

from .base import IdentityService, UserIdentity, UserPage

__all__ = ["IdentityService", "UserIdentity", "UserPage", "create_identity_service"]


def create_identity_service(provider_config) -> IdentityService:
    """Build the identity service described by a ProviderConfig.

    Args:
        provider_config: ProviderConfig from the application configuration

    Returns:
        IdentityService for the configured provider

    Raises:
        ConfigurationError: If the provider type is unknown or incomplete
    """
    from ..exceptions import ConfigurationError

    if provider_config.type == "firebase":
        from .firebase import FirebaseIdentityService, initialize_firebase

        app = initialize_firebase(provider_config.credentials_file)
        return FirebaseIdentityService(app)

    if provider_config.type == "cognito":
        from .cognito import CognitoIdentityService

        if not provider_config.user_pool_id:
            raise ConfigurationError(
                "provider.user_pool_id (or COGNITO_USER_POOL_ID) is required for Cognito"
            )
        return CognitoIdentityService(provider_config.user_pool_id, region=provider_config.region)

    raise ConfigurationError(f"Unknown identity provider: {provider_config.type}")
