import os
from pathlib import Path

import jwt
import pytest

import run
from app.config.loader import ConfigLoader
from app.config.settings import Environment, SecuritySettings, Settings
from app.core.security import TokenVerifier

SECRET = "loader-test-secret-long-enough-for-hs256"

ENV_PREFIXES = ("ENVIRONMENT", "VISION_", "GEMINI_", "TRANSLATION_API_", "SECURITY_", "UPLOAD_", "POLLING_")


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory with no configuration coming from the process environment."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIXES):
            monkeypatch.delenv(key)
    return tmp_path


def write_env(path: Path, **values):
    path.write_text("".join(f"{key}={value}\n" for key, value in values.items()))


def test_environment_file_configures_nested_groups(workdir):
    write_env(
        workdir / ".env.production",
        GEMINI_API_KEY="gemini-key",
        TRANSLATION_API_BASE_URL="https://translate.example.com/",
        TRANSLATION_API_KEY="translate-key",
        SECURITY_JWT_SECRET=SECRET,
        UPLOAD_MAX_IMAGE_SIZE_MB=4,
        POLLING_MAX_POLLS=5,
        LOG_FORMAT="text",
    )

    settings = ConfigLoader.load_environment_config("production")

    assert settings.environment == Environment.PRODUCTION
    assert settings.log_format == "text"
    assert settings.vision.api_key == "gemini-key"
    assert settings.translation_api.base_url == "https://translate.example.com"
    assert settings.translation_api.is_configured
    assert settings.security.jwt_secret == SECRET
    assert settings.upload.max_image_size_mb == 4
    assert settings.polling.max_polls == 5
    assert ConfigLoader.validate_environment_config("production")


def test_explicit_nested_group_wins_over_env_file(workdir):
    write_env(workdir / ".env.staging", SECURITY_JWT_SECRET=SECRET)

    settings = Settings.from_env_file(".env.staging", security=SecuritySettings(jwt_secret="explicit-secret"))

    assert settings.security.jwt_secret == "explicit-secret"


def test_production_without_upstream_keys_is_invalid(workdir):
    write_env(workdir / ".env.production", ENVIRONMENT="production")
    assert not ConfigLoader.validate_environment_config("production")


def test_filled_in_sample_validates(workdir):
    sample = ConfigLoader.create_sample_env_file("production")
    Path(sample).rename(workdir / ".env.production")

    assert ConfigLoader.get_available_environments() == ["production"]
    assert ConfigLoader.validate_environment_config("production")


def test_missing_environment_file_uses_defaults(workdir):
    settings = ConfigLoader.load_environment_config("staging")
    assert settings.environment == Environment.STAGING
    assert settings.polling.max_polls == 30


@pytest.mark.asyncio
async def test_dev_token_verifies_with_environment_secret(workdir, monkeypatch):
    monkeypatch.setenv("SECURITY_JWT_SECRET", SECRET)
    args = run.build_parser().parse_args(["--env", "testing", "--issue-dev-token", "dev-user"])

    token = run.issue_dev_token(args.env, args.issue_dev_token, args.token_minutes)

    claims = await TokenVerifier(SecuritySettings(jwt_secret=SECRET)).verify(token)
    assert claims["sub"] == "dev-user"
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_dev_token_refused_for_production(workdir, monkeypatch):
    monkeypatch.setenv("SECURITY_JWT_SECRET", SECRET)
    with pytest.raises(SystemExit):
        run.issue_dev_token("production", "dev-user")
