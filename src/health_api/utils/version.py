"""Version information for the health API server.

The installed distribution version is produced by the build and may carry the
post count, git commit, dirty flag and build timestamp, for example
``0.1.0.post11+ga524f7b.dirty.2025-03-23T21:41:10Z``.
"""

import re
from importlib.metadata import PackageNotFoundError, version

from loguru import logger
from pydantic import BaseModel

DISTRIBUTION_NAME = "health-api-server"
DEV_VERSION = "0.1.0-dev"

_BASE_RE = re.compile(r"^(\d+\.\d+\.\d+)")
_POST_RE = re.compile(r"\.post(\d+)")
_COMMIT_RE = re.compile(r"\+g([0-9a-f]+)")
_TIMESTAMP_RE = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z)$")


class VersionInfo(BaseModel):
    full_version: str
    version: str
    post_count: str | None = None
    git_commit: str | None = None
    is_dirty: bool = False
    build_timestamp: str | None = None

    @classmethod
    def from_string(cls, full_version: str) -> "VersionInfo":
        base_version, post_count, git_commit, is_dirty, build_timestamp = parse_version(full_version)
        return cls(
            full_version=full_version,
            version=base_version,
            post_count=post_count,
            git_commit=git_commit,
            is_dirty=is_dirty,
            build_timestamp=build_timestamp,
        )


def _group(pattern: re.Pattern, value: str) -> str | None:
    match = pattern.search(value)
    return match.group(1) if match else None


def parse_version(full_version: str) -> tuple[str, str | None, str | None, bool, str | None]:
    """Split a version string into base version, post count, commit, dirty flag and timestamp.

    Components that are absent come back as None (False for the dirty flag);
    an unparseable string is returned whole as the base version.
    """
    base_version = _group(_BASE_RE, full_version) or full_version
    return (
        base_version,
        _group(_POST_RE, full_version),
        _group(_COMMIT_RE, full_version),
        ".dirty" in full_version,
        _group(_TIMESTAMP_RE, full_version),
    )


def get_version() -> VersionInfo:
    """Version of the installed distribution, or a development placeholder."""
    try:
        full_version = version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        logger.warning(f"Distribution {DISTRIBUTION_NAME} is not installed, reporting {DEV_VERSION}")
        full_version = DEV_VERSION
    return VersionInfo.from_string(full_version)
