"""Local fixture files used as upload source and download sink.

Each invocation gets its own run id, so fixture names never collide with a
concurrent run on the same host and cleanup only ever touches this run's
files.
"""
from __future__ import annotations

import logging
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .exceptions import FixtureCleanupError

logger = logging.getLogger(__name__)

FIXTURE_CONTENT = b"s3checker\ntest\n"


@dataclass(frozen=True)
class FixtureConfig:
    directory: Path
    run_id: str
    prefix: str = "s3checker"

    @classmethod
    def create(cls, directory: Optional[str] = None, prefix: str = "s3checker") -> "FixtureConfig":
        return cls(
            directory=Path(directory or tempfile.gettempdir()),
            run_id=uuid.uuid4().hex[:12],
            prefix=prefix,
        )

    @property
    def pattern(self) -> str:
        return f"{self.prefix}-{self.run_id}-*.txt"

    @property
    def upload_path(self) -> Path:
        return self.directory / f"{self.prefix}-{self.run_id}-upload.txt"

    @property
    def seed_path(self) -> Path:
        return self.directory / f"{self.prefix}-{self.run_id}-seed.txt"

    @property
    def download_path(self) -> Path:
        return self.directory / f"{self.prefix}-{self.run_id}-download.txt"


def write_upload_fixture(config: FixtureConfig, path: Optional[Path] = None) -> Path:
    path = path or config.upload_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(FIXTURE_CONTENT)
    return path


def cleanup_fixtures(config: FixtureConfig) -> List[Path]:
    """Delete every file of this run's fixture pattern.

    All matches are attempted even if some fail.

    Returns:
        list: Paths that were removed

    Raises:
        FixtureCleanupError: If one or more files could not be removed
    """
    removed: List[Path] = []
    failures = {}
    for path in sorted(config.directory.glob(config.pattern)):
        try:
            path.unlink()
            removed.append(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            failures[str(path)] = str(e)

    if failures:
        logger.warning(
            "Failed to remove %d fixture file(s)", len(failures),
            extra={"error_type": "FixtureCleanupError", "context": failures},
        )
        raise FixtureCleanupError(
            f"failed to cleanup test files: {', '.join(sorted(failures))}",
            context={"failures": failures},
        )
    logger.debug("Removed %d fixture file(s) matching %s", len(removed), config.pattern)
    return removed
