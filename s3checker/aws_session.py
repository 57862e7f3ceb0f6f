"""AWS session management for s3checker.

Resolves credentials once per run, either through the default boto3
provider chain (implicit auth) or from static keys supplied on the command
line (explicit auth), and hands out clients sharing a single botocore
configuration.
"""

import logging
from typing import Optional, Dict, Any
import boto3
from botocore.exceptions import BotoCoreError, ProfileNotFound
from botocore.config import Config
from .config import AuthMode, CheckerSettings
from .exceptions import AuthenticationError
from .logging_config import enable_sdk_debug_logging

# Region used for STS/S3 when neither the flag nor the provider chain has one
FALLBACK_REGION = "us-east-1"


class AWSSessionManager:
    """Builds and caches the authenticated boto3 session for one check."""

    def __init__(self, settings: CheckerSettings):
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.session: Optional[boto3.Session] = None
        self.auth = settings.auth
        self.region = settings.region

        # Every probe is attempted exactly once; no retries
        self.config = Config(
            retries={'total_max_attempts': 1, 'mode': 'standard'},
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )

        if settings.debug:
            enable_sdk_debug_logging()

    def get_session(self) -> boto3.Session:
        """Get or create the AWS session for the configured auth mode.

        Returns:
            boto3.Session: Session with resolvable credentials

        Raises:
            AuthenticationError: If no credentials can be resolved
        """
        if self.session is not None:
            return self.session

        try:
            if self.auth is AuthMode.EXPLICIT:
                self.logger.info("Using explicit AWS credentials")
                session = boto3.Session(
                    aws_access_key_id=self.settings.key_id,
                    aws_secret_access_key=self.settings.access_key.get_secret_value(),
                    aws_session_token=(
                        self.settings.session_token.get_secret_value()
                        if self.settings.session_token else None
                    ),
                    region_name=self.region,
                )
            else:
                self.logger.info("Using default AWS credential provider chain")
                session = boto3.Session(region_name=self.region)

            # Pre-flight: surface missing credentials before any API call
            credentials = session.get_credentials()
        except ProfileNotFound as e:
            self.logger.error(
                "AWS profile not found", extra={"error_type": "ProfileNotFound", "context": {"auth": self.auth.value}}
            )
            raise AuthenticationError(str(e), context={"auth": self.auth.value}) from e
        except BotoCoreError as e:
            self.logger.error(
                "Credential resolution failed", extra={"error_type": type(e).__name__, "context": {"auth": self.auth.value}}
            )
            raise AuthenticationError(
                f"Credential resolution failed: {e}", context={"auth": self.auth.value}
            ) from e

        if credentials is None:
            hint = (
                "No AWS credentials were found. Remediation options: (a) run 'aws sso login' and set AWS_PROFILE; "
                "(b) export AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY; "
                "(c) run on a host with an instance/container role; or (d) use --auth explicit with --key-id/--access-key."
            )
            self.logger.error("Missing AWS credentials", extra={"error_type": "NoCredentials"})
            raise AuthenticationError(
                "AWS credentials not found",
                context={"auth": self.auth.value, "remediation": hint},
            )

        self.session = session
        return self.session

    @property
    def effective_region(self) -> str:
        """Region for clients: the flag, else the provider default, else us-east-1."""
        if self.region:
            return self.region
        session = self.get_session()
        return session.region_name or FALLBACK_REGION

    def get_client(self, service_name: str, **kwargs) -> Any:
        """Get AWS service client with current session.

        Args:
            service_name: AWS service name (e.g., 'sts', 's3')
            **kwargs: Additional client configuration

        Returns:
            AWS service client
        """
        session = self.get_session()
        client_config = {**kwargs}
        if 'config' not in client_config:
            client_config['config'] = self.config
        if 'region_name' not in client_config:
            client_config['region_name'] = self.effective_region

        return session.client(service_name, **client_config)

    def diagnose_credentials(self) -> Dict[str, Any]:
        """Return a diagnostic snapshot of how credentials were resolved."""
        session = self.get_session()
        credentials = session.get_credentials()
        source = getattr(credentials, "method", None) if credentials else None

        if self.auth is AuthMode.EXPLICIT:
            strategy = "explicit_keys"
        elif credentials is None:
            strategy = "none"
        elif session.profile_name and session.profile_name != "default":
            strategy = "profile"
        else:
            strategy = "default_chain"

        return {
            "auth_strategy": strategy,
            "credential_source": source,
            "profile": session.profile_name,
            "region": self.effective_region,
        }
