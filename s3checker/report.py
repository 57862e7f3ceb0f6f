"""Console rendering of a CheckReport."""
from __future__ import annotations

import os
import sys
from typing import List, Optional, TextIO

from .capabilities import CapabilityVerdict
from .checker import CheckReport
from .probes import ProbeResult

GREEN = "\033[1;32m"
RED = "\033[1;31m"
YELLOW = "\033[1;33m"
RESET = "\033[0m"


def use_color(no_color: bool = False, stream: Optional[TextIO] = None) -> bool:
    if no_color or os.getenv("NO_COLOR"):
        return False
    stream = stream or sys.stdout
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _paint(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{RESET}" if enabled else text


def format_result(result: ProbeResult, color: bool = True) -> str:
    if result.success:
        return f"{result.operation} -- {_paint('successful', GREEN, color)}"
    return f"{result.operation} -- {_paint('failed with error:', RED, color)}\n  {result.error}"


def format_capability(verdict: CapabilityVerdict, color: bool = True) -> str:
    if verdict.sufficient:
        return f"{verdict.name} -- {_paint('sufficient', GREEN, color)}"
    return f"{verdict.name} -- {_paint('not sufficient', RED, color)}"


def _env_section(pairs, found_title: str, empty_title: str) -> List[str]:
    if not pairs:
        return [empty_title, ""]
    return [found_title, *(f"  {k}={v}" for k, v in pairs), ""]


def render_report(report: CheckReport, color: bool = True) -> str:
    lines: List[str] = []
    lines += _env_section(
        report.proxy_env,
        "Environment variables that contain 'proxy' or 'PROXY':",
        "No environment variables that contain 'proxy' or 'PROXY'",
    )
    lines += _env_section(
        report.aws_env,
        "Environment variables that are prefixed with 'AWS_':",
        "No AWS_ prefixed environment variables",
    )

    lines += ["Caller identity:", report.identity.arn]
    if report.identity.account:
        lines.append(f"  account: {report.identity.account}")
    strategy = report.credentials.get("auth_strategy")
    if strategy:
        source = report.credentials.get("credential_source") or "unknown"
        lines.append(f"  auth: {strategy} (source: {source})")
    lines.append("")

    lines += ["EC2 region:", report.ec2_region.description, ""]
    lines += ["Bucket region:", report.bucket_region, ""]

    lines.append("S3 Operations:")
    lines += [format_result(r, color) for r in report.probes]
    lines.append("")

    lines.append("Access sufficient for the following CockroachDB capabilities:")
    lines += [format_capability(v, color) for v in report.capabilities]

    if report.cleanup_warning:
        lines += ["", _paint(report.cleanup_warning, YELLOW, color)]
    return "\n".join(lines) + "\n"


def print_report(report: CheckReport, color: Optional[bool] = None, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    if color is None:
        color = use_color(stream=stream)
    stream.write(render_report(report, color=color))
    stream.flush()
