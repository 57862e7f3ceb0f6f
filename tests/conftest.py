import pytest
from unittest.mock import MagicMock

from s3checker.aws_session import AWSSessionManager
from s3checker.config import load_settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host settings (.env, S3CHECKER_*, AWS profile files) out of tests."""
    monkeypatch.chdir(tmp_path)
    for var in ("S3CHECKER_BUCKET", "S3CHECKER_AUTH", "S3CHECKER_KEY_ID", "S3CHECKER_ACCESS_KEY",
                "S3CHECKER_REGION", "S3CHECKER_SDK_VERSION", "LOG_LEVEL", "LOG_FORMAT", "NO_COLOR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")


@pytest.fixture
def settings_factory(tmp_path):
    def factory(**overrides):
        values = {"bucket": "test-bucket", "fixture_dir": str(tmp_path / "fixtures")}
        values.update(overrides)
        return load_settings(**values)
    return factory


@pytest.fixture
def mock_boto3_clients():
    """Mocked STS and S3 clients with successful default responses."""
    sts_client = MagicMock()
    sts_client.get_caller_identity.return_value = {
        'Arn': 'arn:aws:iam::123456789012:user/test',
        'Account': '123456789012',
        'UserId': 'AIDAEXAMPLE',
    }

    s3_client = MagicMock()
    s3_client.head_bucket.return_value = {
        'ResponseMetadata': {'HTTPHeaders': {'x-amz-bucket-region': 'eu-west-1'}}
    }
    s3_client.list_objects_v2.return_value = {'KeyCount': 0}
    s3_client.get_paginator.return_value.paginate.return_value = iter([{'KeyCount': 0}])

    def download_file(bucket, key, filename, **kwargs):
        with open(filename, "wb") as fh:
            fh.write(b"s3checker\ntest\n")

    s3_client.download_file.side_effect = download_file

    def client_factory(service_name, **kwargs):
        if service_name == 'sts':
            return sts_client
        if service_name == 's3':
            return s3_client
        return MagicMock()

    return {
        'sts': sts_client,
        's3': s3_client,
        'factory': client_factory,
    }


class MockCredentials:
    method = "env"


class MockSession:
    region_name = "us-east-1"
    profile_name = "default"

    def __init__(self, factory):
        self.factory = factory

    def client(self, service_name, **kwargs):
        return self.factory(service_name, **kwargs)

    def get_credentials(self):
        return MockCredentials()


@pytest.fixture
def mock_session_manager(monkeypatch, settings_factory, mock_boto3_clients):
    manager = AWSSessionManager(settings_factory())
    manager.session = MockSession(mock_boto3_clients['factory'])
    return manager


class StubRegionFetcher:
    def __init__(self, region=None, error=None):
        self.region = region
        self.error = error

    def retrieve_region(self):
        if self.error:
            raise self.error
        return self.region


@pytest.fixture
def region_fetcher():
    return StubRegionFetcher(region=None)
