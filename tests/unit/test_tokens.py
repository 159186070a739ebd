from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from stockpos.auth.results import AuthError, Err, Ok
from stockpos.auth.tokens import TokenCodec
from tests.conftest import TEST_SECRET, bearer, make_request

pytestmark = pytest.mark.unit


def test_issue_then_verify_carries_snapshot(codec):
    token = codec.issue(
        subject_id="64b000000000000000000001",
        role_names=["manager", "cashier", "manager"],
        permission_names=["users.view", "brands.*"],
        email="m@example.com",
    )

    result = codec.verify(token)

    assert isinstance(result, Ok)
    identity = result.value
    assert identity.subject_id == "64b000000000000000000001"
    assert identity.email == "m@example.com"
    assert identity.role_names == {"manager", "cashier"}
    assert identity.permission_names == {"users.view", "brands.*"}
    assert identity.expires_at - identity.issued_at == timedelta(days=1)


def test_claims_are_sorted_and_deduplicated(codec):
    token = codec.issue("u1", ["b", "a", "b"], ["roles.view", "users.view", "roles.view"])
    payload = jwt.get_unverified_claims(token)
    assert payload["roles"] == ["a", "b"]
    assert payload["permissions"] == ["roles.view", "users.view"]


def test_expired_token_is_rejected(codec):
    two_days_ago = datetime.now(timezone.utc) - timedelta(days=2)
    token = codec.issue("u1", [], [], now=two_days_ago)

    result = codec.verify(token)

    assert result == Err(AuthError.INVALID_OR_EXPIRED)


def test_token_signed_with_other_secret_is_rejected(codec):
    token = TokenCodec("another-secret").issue("u1", ["admin"], [])
    assert codec.verify(token) == Err(AuthError.INVALID_OR_EXPIRED)


def test_tampered_token_is_rejected(codec):
    token = codec.issue("u1", ["cashier"], ["users.view"])
    header, payload, signature = token.split(".")
    forged = jwt.encode(
        {"sub": "u1", "roles": ["admin"], "permissions": [], "exp": 9999999999},
        "guess",
        algorithm="HS256",
    ).split(".")[1]
    assert codec.verify(f"{header}.{forged}.{signature}") == Err(AuthError.INVALID_OR_EXPIRED)


def test_garbage_token_is_rejected(codec):
    assert codec.verify("not-a-jwt") == Err(AuthError.INVALID_OR_EXPIRED)


def test_token_without_permission_claim_has_no_permission_set():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "sub": "u1",
            "roles": ["admin"],
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=1)).timestamp()),
        },
        TEST_SECRET,
        algorithm="HS256",
    )

    result = TokenCodec(TEST_SECRET).verify(token)

    assert isinstance(result, Ok)
    assert result.value.role_names == {"admin"}
    assert result.value.permission_names is None


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "u1", "roles": []}, TEST_SECRET, algorithm="HS256")
    assert TokenCodec(TEST_SECRET).verify(token) == Err(AuthError.INVALID_OR_EXPIRED)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenCodec("")


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer "},
        {"Authorization": "bearer abc"},
    ],
)
def test_extract_ignores_missing_or_malformed_header(headers):
    assert TokenCodec.extract_from_request(make_request(headers)) is None


def test_extract_reads_bearer_header():
    request = make_request(bearer("abc.def.ghi"))
    assert TokenCodec.extract_from_request(request) == "abc.def.ghi"


def test_identity_to_dict(codec):
    token = codec.issue("u1", ["admin"], ["users.*"], email="a@example.com")
    data = codec.verify(token).value.to_dict()
    assert data["id"] == "u1"
    assert data["email"] == "a@example.com"
    assert data["roleNames"] == ["admin"]
    assert data["permissionNames"] == ["users.*"]
