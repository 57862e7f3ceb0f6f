"""Runs one complete permission check and collects the results.

The flow is: resolve credentials, look up caller identity and regions,
probe list/put/get against the bucket, clean up local fixtures, then map
the probe outcomes to capabilities. Fatal errors propagate as
S3CheckerError subclasses; probe failures and cleanup failures are
returned as data.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .aws_session import AWSSessionManager
from .capabilities import CapabilityVerdict, map_capabilities
from .config import CheckerSettings
from .exceptions import ConfigurationError, FixtureCleanupError
from .fixtures import FixtureConfig, cleanup_fixtures
from .identity import CallerIdentity, Ec2RegionResult, get_bucket_region, get_caller_identity, get_ec2_region
from .probes import ProbeResults, get_storage_probe, run_probes

logger = logging.getLogger(__name__)

CREDENTIAL_ENV_PREFIX = "AWS_"


@dataclass
class CheckReport:
    bucket: str
    identity: CallerIdentity
    ec2_region: Ec2RegionResult
    bucket_region: str
    probes: ProbeResults
    capabilities: List[CapabilityVerdict]
    proxy_env: List[Tuple[str, str]] = field(default_factory=list)
    aws_env: List[Tuple[str, str]] = field(default_factory=list)
    credentials: Dict[str, Any] = field(default_factory=dict)
    cleanup_warning: Optional[str] = None


def collect_env_vars(environ: Optional[Mapping[str, str]] = None) -> Tuple[List[Tuple[str, str]], List[Tuple[str, str]]]:
    """Return (proxy-related, AWS_-prefixed) environment variables, sorted by name."""
    environ = os.environ if environ is None else environ
    proxy = sorted((k, v) for k, v in environ.items() if "proxy" in k.lower())
    aws = sorted((k, v) for k, v in environ.items() if k.startswith(CREDENTIAL_ENV_PREFIX))
    return proxy, aws


class S3Checker:
    """Orchestrates a single check against one bucket.

    The session manager and IMDS region fetcher can be injected, which is
    how the tests drive the flow without AWS.
    """

    def __init__(self, settings: CheckerSettings, session_manager: Optional[AWSSessionManager] = None,
                 region_fetcher: Any = None, environ: Optional[Mapping[str, str]] = None):
        if not settings.bucket:
            raise ConfigurationError("bucket is required")
        self.settings = settings
        self.session_manager = session_manager or AWSSessionManager(settings)
        self.region_fetcher = region_fetcher
        self.environ = environ

    def run(self) -> CheckReport:
        settings = self.settings
        bucket = settings.bucket
        mgr = self.session_manager

        mgr.get_session()
        identity = get_caller_identity(mgr)
        logger.info("Authenticated as %s", identity.arn)
        credentials = mgr.diagnose_credentials()

        ec2_region = get_ec2_region(mgr, self.region_fetcher)
        bucket_region = get_bucket_region(mgr, bucket)
        logger.info("Bucket %s is in %s", bucket, bucket_region)

        fixtures = FixtureConfig.create(settings.fixture_dir, settings.fixture_prefix)
        cleanup_warning = None
        try:
            client = mgr.get_client("s3", region_name=bucket_region)
            probe = get_storage_probe(
                settings.sdk_version, client, bucket, fixtures,
                put_key=settings.put_object_key, get_key=settings.get_object_key,
            )
            results = run_probes(probe)
        finally:
            try:
                cleanup_fixtures(fixtures)
            except FixtureCleanupError as e:
                cleanup_warning = f"warning: {e}"

        capabilities = map_capabilities(
            results.list_objects.success,
            results.put_object.success,
            results.get_object.success,
        )
        proxy_env, aws_env = collect_env_vars(self.environ)

        return CheckReport(
            bucket=bucket,
            identity=identity,
            ec2_region=ec2_region,
            bucket_region=bucket_region,
            probes=results,
            capabilities=capabilities,
            proxy_env=proxy_env,
            aws_env=aws_env,
            credentials=credentials,
            cleanup_warning=cleanup_warning,
        )


def run_check(settings: CheckerSettings, **kwargs) -> CheckReport:
    return S3Checker(settings, **kwargs).run()
