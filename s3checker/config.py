from enum import Enum
from typing import Optional
import re
import logging
from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator, ConfigDict
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


class AuthMode(str, Enum):
    IMPLICIT = "implicit"
    EXPLICIT = "explicit"


class CheckerSettings(BaseSettings):
    """Validated configuration for a single s3checker run.

    Values come from S3CHECKER_* environment variables or a local .env file
    and are overridden by command-line flags. AWS_* variables are not read
    here; implicit auth leaves them to the boto3 provider chain.
    """

    bucket: Optional[str] = Field(default=None, validation_alias="S3CHECKER_BUCKET")
    auth: AuthMode = Field(default=AuthMode.IMPLICIT, validation_alias="S3CHECKER_AUTH")
    key_id: Optional[str] = Field(default=None, validation_alias="S3CHECKER_KEY_ID")
    access_key: Optional[SecretStr] = Field(default=None, validation_alias="S3CHECKER_ACCESS_KEY")
    session_token: Optional[SecretStr] = Field(default=None, validation_alias="S3CHECKER_SESSION_TOKEN")
    region: Optional[str] = Field(
        default=None,
        validation_alias="S3CHECKER_REGION",
        description="Region override; provider default when unset"
    )
    debug: bool = Field(default=False, validation_alias="S3CHECKER_DEBUG")
    sdk_version: int = Field(
        default=1,
        validation_alias="S3CHECKER_SDK_VERSION",
        ge=1,
        le=2,
        description="Storage probe backend: 1 = managed transfers, 2 = low-level client calls"
    )
    no_color: bool = Field(default=False, validation_alias="S3CHECKER_NO_COLOR")

    # Local fixtures and remote object keys
    fixture_dir: Optional[str] = Field(
        default=None, validation_alias="S3CHECKER_FIXTURE_DIR",
        description="Directory for upload/download fixtures (system temp dir when unset)"
    )
    fixture_prefix: str = Field(default="s3checker", validation_alias="S3CHECKER_FIXTURE_PREFIX")
    put_object_key: str = Field(default="testing1.txt", validation_alias="S3CHECKER_PUT_OBJECT_KEY")
    get_object_key: str = Field(default="testing2.txt", validation_alias="S3CHECKER_GET_OBJECT_KEY")

    connect_timeout: int = Field(default=10, validation_alias="S3CHECKER_CONNECT_TIMEOUT", ge=1, le=300)
    read_timeout: int = Field(default=60, validation_alias="S3CHECKER_READ_TIMEOUT", ge=1, le=600)

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="text",
        validation_alias="LOG_FORMAT",
        description="Log output format: text or json"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("key_id", "region", "fixture_dir", mode="before")
    def strip_strings(cls, v):  # type: ignore
        if v is None:
            return v
        vs = str(v).strip()
        return vs or None

    @field_validator("access_key", "session_token", mode="before")
    def empty_secret_is_none(cls, v):  # type: ignore
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("bucket")
    def validate_bucket(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not re.match(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$", v) or ".." in v:
            raise ValueError(f"Invalid S3 bucket name: {v!r}")
        return v

    @field_validator("region")
    def validate_region(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not re.match(r"^[a-z]{2}(-[a-z]+)+-\d$", v):
            raise ValueError(f"Invalid AWS region format: {v}")
        return v

    @field_validator("put_object_key", "get_object_key", "fixture_prefix")
    def validate_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        lvl = v.upper().strip()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if lvl not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return lvl

    @field_validator("log_format")
    def validate_log_format(cls, v: str) -> str:
        fmt = v.strip().lower()
        allowed = {"text", "json"}
        if fmt not in allowed:
            raise ValueError(f"log_format must be one of {sorted(allowed)}")
        return fmt

    @model_validator(mode="after")
    def validate_auth_method(self):
        logger = logging.getLogger(__name__)
        has_key_id = bool(self.key_id)
        has_secret = self.access_key is not None
        if has_key_id != has_secret:
            raise ValueError("key_id and access_key must be supplied together")
        if self.auth is AuthMode.EXPLICIT and not (has_key_id and has_secret):
            raise ValueError("explicit auth requires key_id and access_key")
        if self.auth is AuthMode.IMPLICIT and has_key_id:
            logger.warning("key_id/access_key supplied with implicit auth; they will be ignored")
        if self.session_token is not None and self.auth is AuthMode.IMPLICIT:
            logger.warning("session_token is only used with explicit auth")
        return self


def load_settings(**overrides) -> CheckerSettings:
    """Build settings with explicit overrides (typically CLI flags).

    None values are dropped so unset flags fall back to the environment.
    Raises ConfigurationError instead of pydantic's ValidationError.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return CheckerSettings(**values)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationError("; ".join(problems), context={"errors": problems}) from e

