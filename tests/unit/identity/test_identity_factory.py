"""Tests for building identity services from configuration."""

from unittest.mock import Mock, patch

import pytest

from src.forcelogout.exceptions import ConfigurationError
from src.forcelogout.identity import create_identity_service
from src.forcelogout.identity.cognito import CognitoIdentityService
from src.forcelogout.identity.firebase import FirebaseIdentityService
from src.forcelogout.utils.config import ProviderConfig


def test_firebase_provider():
    app = Mock()
    with patch(
        "src.forcelogout.identity.firebase.initialize_firebase", return_value=app
    ) as initialize:
        service = create_identity_service(ProviderConfig(credentials_file="key.json"))

    initialize.assert_called_once_with("key.json")
    assert isinstance(service, FirebaseIdentityService)
    assert service.app is app


def test_cognito_provider():
    with patch("src.forcelogout.identity.cognito.boto3.client") as client:
        service = create_identity_service(
            ProviderConfig(type="cognito", user_pool_id="eu-west-1_pool", region="eu-west-1")
        )

    client.assert_called_once_with("cognito-idp", region_name="eu-west-1")
    assert isinstance(service, CognitoIdentityService)
    assert service.user_pool_id == "eu-west-1_pool"


def test_cognito_requires_user_pool_id():
    with pytest.raises(ConfigurationError):
        create_identity_service(ProviderConfig(type="cognito"))


def test_unknown_provider():
    with pytest.raises(ConfigurationError):
        create_identity_service(ProviderConfig(type="okta"))
