import time

import jwt
import pytest

from services.roles import Role, RoleResolver
from tests.conftest import JWT_SECRET


@pytest.fixture
def resolver():
    return RoleResolver(secret=JWT_SECRET)


def _token(claims, secret=JWT_SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


def test_admin_claim(resolver):
    token = _token({"sub": "u1", "app_metadata": {"role": "Admin"}})
    assert resolver.resolve(f"Bearer {token}") == Role.ADMIN


def test_any_other_valid_token_is_a_user(resolver):
    assert resolver.resolve(f"Bearer {_token({'sub': 'u1'})}") == Role.USER
    assert resolver.resolve(f"Bearer {_token({'sub': 'u1', 'app_metadata': {'role': 'Editor'}})}") == Role.USER


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Basic abc", "Bearer not-a-jwt"])
def test_missing_or_malformed_header_is_anonymous(resolver, header):
    assert resolver.resolve(header) == Role.ANONYMOUS


def test_bad_signature_is_anonymous(resolver):
    token = _token({"app_metadata": {"role": "Admin"}}, secret="some-other-secret-of-sufficient-length")
    assert resolver.resolve(f"Bearer {token}") == Role.ANONYMOUS


def test_expired_token_is_anonymous(resolver):
    token = _token({"app_metadata": {"role": "Admin"}, "exp": int(time.time()) - 60})
    assert resolver.resolve(f"Bearer {token}") == Role.ANONYMOUS
