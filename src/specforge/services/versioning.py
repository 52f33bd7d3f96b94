"""Semantic version allocation for uploaded spec versions."""

from collections.abc import Sequence

from specforge.errors.exceptions import ValidationError
from specforge.models.enums import BumpPolicy

INITIAL_VERSION = "1.0.0"


def parse_version(version: str) -> tuple[int, int, int]:
    """Split ``major.minor.patch`` into integers."""
    parts = version.strip().split(".")
    if len(parts) != 3 or not all(part.isdecimal() for part in parts):
        raise ValidationError(
            f"Version '{version}' is not in major.minor.patch form",
            details={"version": version},
        )
    major, minor, patch = (int(part) for part in parts)
    return major, minor, patch


def next_version(history: Sequence[str], policy: BumpPolicy = BumpPolicy.PATCH) -> str:
    """Return the version that follows the newest entry of ``history``.

    ``history`` is ordered newest first. Only the selected segment is
    incremented; there is no carry between segments.
    """
    if not history:
        return INITIAL_VERSION

    major, minor, patch = parse_version(history[0])
    if policy == BumpPolicy.MAJOR:
        return f"{major + 1}.0.0"
    if policy == BumpPolicy.MINOR:
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"
