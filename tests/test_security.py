import pytest
from jose.exceptions import ExpiredSignatureError, JWTError
from jose import jwt

from app.core.config import get_settings
from app.core.security import create_access_token, decode_token


def test_round_trip_keeps_subject_and_extra_claims():
    token = create_access_token("athlete-9", extra={"scope": "workouts"})
    payload = decode_token(token)
    assert payload["sub"] == "athlete-9"
    assert payload["scope"] == "workouts"


def test_expired_token_is_rejected():
    token = create_access_token("athlete-9", expires_minutes=-1)
    with pytest.raises(ExpiredSignatureError):
        decode_token(token)


def test_token_without_exp_is_rejected():
    s = get_settings()
    token = jwt.encode({"sub": "athlete-9"}, s.jwt_secret_key, algorithm=s.jwt_algorithm)
    with pytest.raises(JWTError):
        decode_token(token)


def test_wrong_secret_is_rejected():
    token = jwt.encode({"sub": "athlete-9", "exp": 9999999999}, "other-secret", algorithm="HS256")
    with pytest.raises(JWTError):
        decode_token(token)
