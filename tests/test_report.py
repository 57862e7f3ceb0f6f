import io

from s3checker.capabilities import map_capabilities
from s3checker.checker import CheckReport
from s3checker.identity import CallerIdentity, Ec2RegionResult
from s3checker.probes import ProbeResult, ProbeResults
from s3checker.report import GREEN, RED, format_capability, format_result, print_report, render_report, use_color


def make_report(**overrides):
    probes = ProbeResults(
        list_objects=ProbeResult('list objects', True),
        put_object=ProbeResult('put object', False, 'AccessDenied: put denied'),
        get_object=ProbeResult('get object', True),
    )
    values = dict(
        bucket='test-bucket',
        identity=CallerIdentity(arn='arn:aws:iam::123456789012:user/test', account='123456789012'),
        ec2_region=Ec2RegionResult(region=None),
        bucket_region='eu-west-1',
        probes=probes,
        capabilities=map_capabilities(True, False, True),
        proxy_env=[('HTTPS_PROXY', 'http://proxy:3128')],
        aws_env=[],
        credentials={'auth_strategy': 'default_chain', 'credential_source': 'env'},
    )
    values.update(overrides)
    return CheckReport(**values)


def test_render_plain_order():
    text = render_report(make_report(), color=False)
    sections = [
        "Environment variables that contain 'proxy' or 'PROXY':",
        "  HTTPS_PROXY=http://proxy:3128",
        "No AWS_ prefixed environment variables",
        "Caller identity:",
        "arn:aws:iam::123456789012:user/test",
        "EC2 region:",
        "Not an EC2 instance",
        "Bucket region:",
        "eu-west-1",
        "S3 Operations:",
        "list objects -- successful",
        "put object -- failed with error:\n  AccessDenied: put denied",
        "get object -- successful",
        "Access sufficient for the following CockroachDB capabilities:",
        "Backup -- not sufficient",
        "Restore -- sufficient",
        "Import -- sufficient",
        "Export -- not sufficient",
        "Enterprise Changefeeds -- not sufficient",
    ]
    positions = [text.index(s) for s in sections]
    assert positions == sorted(positions)
    assert "\033[" not in text


def test_render_no_proxy_and_aws_vars():
    text = render_report(make_report(proxy_env=[], aws_env=[('AWS_PROFILE', 'dev')]), color=False)
    assert "No environment variables that contain 'proxy' or 'PROXY'" in text
    assert "Environment variables that are prefixed with 'AWS_':\n  AWS_PROFILE=dev" in text


def test_secret_env_values_not_redacted():
    text = render_report(make_report(aws_env=[('AWS_SECRET_ACCESS_KEY', 'abc123')]), color=False)
    assert "AWS_SECRET_ACCESS_KEY=abc123" in text


def test_colored_markers():
    assert format_result(ProbeResult('list objects', True)) == f"list objects -- {GREEN}successful\033[0m"
    assert format_result(ProbeResult('put object', False, 'boom')).startswith(f"put object -- {RED}failed with error:")
    verdicts = map_capabilities(False, False, False)
    assert RED in format_capability(verdicts[0])


def test_cleanup_warning_printed_after_capabilities():
    text = render_report(make_report(cleanup_warning='warning: failed to cleanup test files: x'), color=False)
    assert text.index('warning: failed to cleanup') > text.index('Enterprise Changefeeds')


def test_print_report_non_tty_has_no_color():
    stream = io.StringIO()
    print_report(make_report(), stream=stream)
    assert "\033[" not in stream.getvalue()
    assert stream.getvalue().endswith("Enterprise Changefeeds -- not sufficient\n")


def test_use_color_respects_no_color(monkeypatch):
    class Tty(io.StringIO):
        def isatty(self):
            return True
    assert use_color(stream=Tty()) is True
    assert use_color(no_color=True, stream=Tty()) is False
    monkeypatch.setenv("NO_COLOR", "1")
    assert use_color(stream=Tty()) is False
