"""String enums used across the API and services."""

from enum import StrEnum


class SpecFormat(StrEnum):
    JSON = "json"
    YAML = "yaml"
    TEXT = "text"


class DiffView(StrEnum):
    SPLIT = "split"
    UNIFIED = "unified"


class BumpPolicy(StrEnum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class VersionState(StrEnum):
    UPLOADED = "uploaded"
    CLIENT_GENERATED = "client_generated"
    PUBLISH_TRIGGERED = "publish_triggered"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"


class PublishMode(StrEnum):
    NPM = "npm"
    GITHUB_DISPATCH = "github_dispatch"
