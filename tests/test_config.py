import pytest

from s3checker.config import AuthMode, CheckerSettings, load_settings
from s3checker.exceptions import ConfigurationError


def test_defaults():
    settings = load_settings(bucket="my-bucket")
    assert settings.auth is AuthMode.IMPLICIT
    assert settings.sdk_version == 1
    assert settings.region is None
    assert settings.debug is False
    assert settings.put_object_key == "testing1.txt"
    assert settings.get_object_key == "testing2.txt"


def test_explicit_requires_both_keys():
    with pytest.raises(ConfigurationError) as exc:
        load_settings(bucket="my-bucket", auth="explicit", key_id="AKIAFAKE")
    assert "supplied together" in str(exc.value)


def test_explicit_without_any_keys_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(bucket="my-bucket", auth="explicit")


def test_explicit_with_keys():
    settings = load_settings(
        bucket="my-bucket", auth="explicit", key_id="AKIAFAKE", access_key="secret", session_token="token"
    )
    assert settings.auth is AuthMode.EXPLICIT
    assert settings.access_key.get_secret_value() == "secret"
    assert settings.session_token.get_secret_value() == "token"
    # Secrets are masked in reprs
    assert "secret" not in repr(settings)


def test_secret_without_key_id_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(bucket="my-bucket", access_key="secret")


@pytest.mark.parametrize("version", [0, 3])
def test_sdk_version_range(version):
    with pytest.raises(ConfigurationError):
        load_settings(bucket="my-bucket", sdk_version=version)


@pytest.mark.parametrize("region", ["us-east-1", "eu-central-1", "us-gov-west-1", "ap-southeast-2"])
def test_valid_regions(region):
    assert load_settings(bucket="my-bucket", region=region).region == region


def test_invalid_region():
    with pytest.raises(ConfigurationError) as exc:
        load_settings(bucket="my-bucket", region="Mars-1")
    assert "region" in str(exc.value)


def test_blank_region_treated_as_unset():
    assert load_settings(bucket="my-bucket", region="  ").region is None


@pytest.mark.parametrize("bucket", ["ab", "Upper-Case", "-leading", "x" * 64, "my_bucket", "my..bucket"])
def test_invalid_bucket_names(bucket):
    with pytest.raises(ConfigurationError):
        load_settings(bucket=bucket)


def test_env_vars_are_read(monkeypatch):
    monkeypatch.setenv("S3CHECKER_BUCKET", "env-bucket")
    monkeypatch.setenv("S3CHECKER_SDK_VERSION", "2")
    settings = CheckerSettings()
    assert settings.bucket == "env-bucket"
    assert settings.sdk_version == 2


def test_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("S3CHECKER_BUCKET", "env-bucket")
    assert load_settings(bucket="flag-bucket").bucket == "flag-bucket"


def test_log_settings_normalized():
    settings = load_settings(bucket="my-bucket", log_level="debug", log_format="JSON")
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"


def test_invalid_log_format():
    with pytest.raises(ConfigurationError):
        load_settings(bucket="my-bucket", log_format="xml")
