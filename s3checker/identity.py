"""Identity and region lookups run before the storage probes.

Caller identity and bucket region are required to produce a meaningful
report, so their failures raise. The EC2 region is informational only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError
from botocore.utils import InstanceMetadataRegionFetcher

from .aws_session import AWSSessionManager
from .exceptions import BucketRegionError, CallerIdentityError

logger = logging.getLogger(__name__)

NOT_EC2_MESSAGE = "Not an EC2 instance"
BUCKET_REGION_HINT = "us-east-1"
BUCKET_REGION_HEADER = "x-amz-bucket-region"


@dataclass(frozen=True)
class CallerIdentity:
    arn: str
    account: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Ec2RegionResult:
    region: Optional[str]
    error: Optional[str] = None

    @property
    def description(self) -> str:
        if self.region:
            return self.region
        if self.error:
            return f"Does not appear to be an EC2 instance: {self.error}"
        return NOT_EC2_MESSAGE


def _error_code(e: ClientError) -> Optional[str]:
    return e.response.get("Error", {}).get("Code")


def get_caller_identity(manager: AWSSessionManager) -> CallerIdentity:
    """Return the principal the credentials authenticate as.

    Raises:
        CallerIdentityError: If STS GetCallerIdentity fails
    """
    try:
        sts = manager.get_client("sts")
        ident = sts.get_caller_identity()
    except ClientError as e:
        code = _error_code(e)
        logger.error("GetCallerIdentity failed", extra={"error_type": code, "context": {"region": manager.region}})
        raise CallerIdentityError(f"get caller identity failed: {e}", context={"code": code}) from e
    except BotoCoreError as e:
        logger.error("GetCallerIdentity failed", extra={"error_type": type(e).__name__})
        raise CallerIdentityError(f"get caller identity failed: {e}") from e

    return CallerIdentity(arn=ident.get("Arn"), account=ident.get("Account"), user_id=ident.get("UserId"))


def get_ec2_region(manager: AWSSessionManager, fetcher: Any = None) -> Ec2RegionResult:
    """Best-effort region lookup through the instance metadata service."""
    fetcher = fetcher or InstanceMetadataRegionFetcher(timeout=1, num_attempts=1)
    try:
        region = fetcher.retrieve_region()
    except (BotoCoreError, OSError) as e:
        logger.info("Instance metadata region lookup failed: %s", e)
        return Ec2RegionResult(region=None, error=str(e))
    return Ec2RegionResult(region=region or None)


def _region_from_headers(response: Dict[str, Any]) -> Optional[str]:
    headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {}) or {}
    return headers.get(BUCKET_REGION_HEADER)


def get_bucket_region(manager: AWSSessionManager, bucket: str) -> str:
    """Return the region the bucket lives in.

    HeadBucket answers with the x-amz-bucket-region header even on 301 and
    403 responses, so a caller without read access can still locate it.

    Raises:
        BucketRegionError: If the bucket cannot be located
    """
    try:
        s3 = manager.get_client("s3", region_name=BUCKET_REGION_HINT)
        response = s3.head_bucket(Bucket=bucket)
    except ClientError as e:
        region = _region_from_headers(e.response)
        if region:
            logger.info("HeadBucket returned %s but located bucket in %s", _error_code(e), region)
            return region
        code = _error_code(e)
        if code in {"404", "NoSuchBucket", "NotFound"}:
            message = f"bucket {bucket!r} does not exist"
        else:
            message = f"get bucket region failed: {e}"
        logger.error("Bucket region lookup failed", extra={"error_type": code, "context": {"bucket": bucket}})
        raise BucketRegionError(message, context={"bucket": bucket, "code": code}) from e
    except BotoCoreError as e:
        logger.error("Bucket region lookup failed", extra={"error_type": type(e).__name__, "context": {"bucket": bucket}})
        raise BucketRegionError(f"get bucket region failed: {e}", context={"bucket": bucket}) from e

    region = _region_from_headers(response)
    if not region:
        raise BucketRegionError(
            f"get bucket region failed: no {BUCKET_REGION_HEADER} header in response",
            context={"bucket": bucket},
        )
    return region
