import pytest

from app.config.settings import AuthMode, SecuritySettings
from app.core.exceptions import AuthError, ErrorCode
from app.core.security import TokenVerifier, extract_bearer_token, issue_token

SECRET = "unit-test-secret-long-enough-for-hs256"


@pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc", "Bearer ", "Bearer    "])
def test_malformed_headers_rejected(header):
    with pytest.raises(AuthError) as exc_info:
        extract_bearer_token(header)
    assert exc_info.value.status_code == 401
    assert exc_info.value.error_code == ErrorCode.MISSING_AUTHORIZATION


def test_bearer_token_extracted():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.asyncio
async def test_issue_and_verify_token():
    verifier = TokenVerifier(SecuritySettings(jwt_secret=SECRET))
    claims = await verifier.verify(issue_token(SECRET, "user-1", expires_minutes=5))
    assert claims["sub"] == "user-1"
    assert "exp" in claims


@pytest.mark.asyncio
async def test_token_signed_with_another_secret_rejected():
    verifier = TokenVerifier(SecuritySettings(jwt_secret=SECRET))
    token = issue_token("some-other-secret-that-is-long-enough", "user-1")
    with pytest.raises(AuthError) as exc_info:
        await verifier.verify(token)
    assert exc_info.value.error_code == ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_expired_token_rejected():
    verifier = TokenVerifier(SecuritySettings(jwt_secret=SECRET))
    with pytest.raises(AuthError):
        await verifier.verify(issue_token(SECRET, "user-1", expires_minutes=-5))


@pytest.mark.asyncio
async def test_garbage_token_rejected():
    verifier = TokenVerifier(SecuritySettings(jwt_secret=SECRET))
    with pytest.raises(AuthError):
        await verifier.verify("not-a-jwt")


@pytest.mark.asyncio
async def test_audience_checked_when_configured():
    verifier = TokenVerifier(SecuritySettings(jwt_secret=SECRET, jwt_audience="menu-lens"))
    assert (await verifier.verify(issue_token(SECRET, "u", aud="menu-lens")))["aud"] == "menu-lens"
    with pytest.raises(AuthError):
        await verifier.verify(issue_token(SECRET, "u", aud="someone-else"))


@pytest.mark.asyncio
async def test_presence_mode_accepts_any_token():
    verifier = TokenVerifier(SecuritySettings(auth_mode=AuthMode.PRESENCE))
    assert not verifier.enabled
    assert await verifier.verify("anything") == {}
