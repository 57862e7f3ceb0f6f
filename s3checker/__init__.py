"""s3checker

Checks whether a set of AWS credentials can list, write and read objects
in a bucket, and which CockroachDB cloud capabilities that enables.
"""

__version__ = "0.1.0"

from .checker import CheckReport, S3Checker, run_check  # noqa: E402
from .capabilities import CapabilityVerdict, map_capabilities  # noqa: E402
from .aws_session import AWSSessionManager  # noqa: E402

__all__ = ['CheckReport', 'S3Checker', 'run_check', 'CapabilityVerdict', 'map_capabilities', 'AWSSessionManager']
