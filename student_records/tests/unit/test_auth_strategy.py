import pytest
from unittest.mock import Mock

from student_records.src.services.auth import AuthService, AuthError, JWTValidator, TokenValidator
from student_records.src.services.config import AppConfig
from student_records.src.models.auth import JWTPayload


# Mock config
@pytest.fixture
def mock_config():
    config = Mock(spec=AppConfig)
    config.jwt_secret_key = "unit-test-secret-value"
    config.jwt_issuer = "student-records-api"
    config.jwt_audience = "student-records-portal"
    config.token_ttl_minutes = 60
    config.admin_username = "admin"
    config.admin_password = "password"
    return config


def test_jwt_validator_is_the_only_strategy(mock_config):
    auth = AuthService(config=mock_config)

    assert len(auth.validators) == 1
    assert isinstance(auth.validators[0], JWTValidator)


def test_jwt_validator_ignores_non_jwt(mock_config):
    validator = JWTValidator(mock_config)

    assert validator.validate("definitely-not-a-jwt") is None


def test_validator_chain_stops_on_first_payload(mock_config):
    auth = AuthService(config=mock_config)
    payload = JWTPayload(
        sub="admin", jti="abc", iss="x", aud="y", iat=0, exp=9999999999
    )
    first = Mock(spec=TokenValidator)
    first.validate.return_value = payload
    second = Mock(spec=TokenValidator)
    auth.validators = [first, second]

    assert auth.validate_jwt("anything") is payload
    second.validate.assert_not_called()


def test_validator_chain_propagates_rejection(mock_config):
    auth = AuthService(config=mock_config)
    rejecting = Mock(spec=TokenValidator)
    rejecting.validate.side_effect = AuthError("token_expired", "Token expired")
    auth.validators = [rejecting]

    with pytest.raises(AuthError, match="Token expired"):
        auth.validate_jwt("anything")
