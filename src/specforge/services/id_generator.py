"""Prefixed identifiers for stored rows."""

import uuid

PROJECT_PREFIX = "proj_"
SPEC_PREFIX = "spec_"
VERSION_PREFIX = "ver_"
CLIENT_PREFIX = "cli_"


def generate_id(prefix: str) -> str:
    """Return ``prefix`` followed by 16 random hex characters, e.g. ``ver_a1b2c3d4e5f6a7b8``."""
    return f"{prefix}{uuid.uuid4().hex[:16]}"
