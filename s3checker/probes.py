"""Storage permission probes.

Each probe makes one attempt at a list, write or read against the target
bucket and reports the outcome as data. Two interchangeable backends
exist, selected by ``sdk_version``:

 - 1: managed transfers (``upload_file``/``download_file`` via s3transfer)
 - 2: low-level client calls (``put_object``/``get_object`` and the
   ListObjectsV2 paginator)

Both share the same ProbeResult shape, so capability mapping and reporting
do not care which one ran.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import ConfigurationError
from .fixtures import FixtureConfig, write_upload_fixture

logger = logging.getLogger(__name__)

PROBE_ERRORS = (ClientError, BotoCoreError, Boto3Error, OSError)

LIST_OBJECTS = "list objects"
PUT_OBJECT = "put object"
GET_OBJECT = "get object"


@dataclass(frozen=True)
class ProbeResult:
    operation: str
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ProbeResults:
    list_objects: ProbeResult
    put_object: ProbeResult
    get_object: ProbeResult

    def __iter__(self):
        return iter((self.list_objects, self.put_object, self.get_object))


@runtime_checkable
class StorageProbe(Protocol):
    def can_list_objects(self) -> ProbeResult: ...

    def can_put_object(self) -> ProbeResult: ...

    def can_get_object(self) -> ProbeResult: ...


class _BaseStorageProbe(ABC):
    """Shared plumbing: fixture handling and failure capture."""

    def __init__(self, client: Any, bucket: str, fixtures: FixtureConfig,
                 put_key: str = "testing1.txt", get_key: str = "testing2.txt"):
        self.client = client
        self.bucket = bucket
        self.fixtures = fixtures
        self.put_key = put_key
        self.get_key = get_key

    def _attempt(self, operation: str, fn: Callable[[], None]) -> ProbeResult:
        try:
            fn()
        except PROBE_ERRORS as e:
            logger.info("%s failed: %s", operation, e, extra={"error_type": type(e).__name__, "context": {"bucket": self.bucket}})
            return ProbeResult(operation, False, str(e))
        logger.debug("%s succeeded", operation)
        return ProbeResult(operation, True)

    def can_list_objects(self) -> ProbeResult:
        return self._attempt(LIST_OBJECTS, self._list)

    def can_put_object(self) -> ProbeResult:
        def _put():
            path = write_upload_fixture(self.fixtures)
            self._upload(path, self.put_key)
        return self._attempt(PUT_OBJECT, _put)

    def can_get_object(self) -> ProbeResult:
        def _get():
            # Seed a known object so the read does not depend on the put probe
            path = write_upload_fixture(self.fixtures, self.fixtures.seed_path)
            self._upload(path, self.get_key)
            self._download(self.get_key, self.fixtures.download_path)
        return self._attempt(GET_OBJECT, _get)

    @abstractmethod
    def _list(self) -> None: ...

    @abstractmethod
    def _upload(self, path, key: str) -> None: ...

    @abstractmethod
    def _download(self, key: str, path) -> None: ...


class TransferStorageProbe(_BaseStorageProbe):
    """Managed-transfer backend (sdk_version 1)."""

    # s3transfer retries interrupted downloads by default
    transfer_config = TransferConfig(num_download_attempts=1)

    def _list(self) -> None:
        self.client.list_objects_v2(Bucket=self.bucket)

    def _upload(self, path, key: str) -> None:
        self.client.upload_file(str(path), self.bucket, key, Config=self.transfer_config)

    def _download(self, key: str, path) -> None:
        self.client.download_file(self.bucket, key, str(path), Config=self.transfer_config)


class ClientStorageProbe(_BaseStorageProbe):
    """Low-level client backend (sdk_version 2)."""

    def _list(self) -> None:
        paginator = self.client.get_paginator("list_objects_v2")
        # The first page is enough to prove the permission
        for _page in paginator.paginate(Bucket=self.bucket):
            break

    def _upload(self, path, key: str) -> None:
        with open(path, "rb") as fh:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=fh)

    def _download(self, key: str, path) -> None:
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        body = response["Body"]
        try:
            with open(path, "wb") as fh:
                for chunk in body.iter_chunks():
                    fh.write(chunk)
        finally:
            body.close()


BACKENDS = {
    1: TransferStorageProbe,
    2: ClientStorageProbe,
}


def get_storage_probe(sdk_version: int, client: Any, bucket: str, fixtures: FixtureConfig,
                      put_key: str = "testing1.txt", get_key: str = "testing2.txt") -> StorageProbe:
    try:
        backend = BACKENDS[sdk_version]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported sdk version: {sdk_version}", context={"allowed": sorted(BACKENDS)}
        ) from None
    return backend(client, bucket, fixtures, put_key=put_key, get_key=get_key)


def run_probes(probe: StorageProbe) -> ProbeResults:
    """Run list, put and get once each. Failures are captured, never raised."""
    return ProbeResults(
        list_objects=probe.can_list_objects(),
        put_object=probe.can_put_object(),
        get_object=probe.can_get_object(),
    )


__all__ = [
    "ProbeResult",
    "ProbeResults",
    "StorageProbe",
    "TransferStorageProbe",
    "ClientStorageProbe",
    "get_storage_probe",
    "run_probes",
]
