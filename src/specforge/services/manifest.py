"""package.json construction shared by every publish path."""

from specforge.db.models.npm_config import NpmConfigRow

DEFAULT_DESCRIPTION = "Generated API client"
DEFAULT_ENTRY = "index.js"
DEFAULT_LICENSE = "MIT"
KEYWORDS = ["api", "client", "openapi", "swagger", "generated"]


def build_manifest(
    package_name: str,
    version: str,
    description: str | None = None,
    author: str | None = None,
) -> dict:
    """Build the manifest for a generated client package."""
    return {
        "name": package_name,
        "version": version,
        "description": description or DEFAULT_DESCRIPTION,
        "main": DEFAULT_ENTRY,
        "author": author or "",
        "license": DEFAULT_LICENSE,
        "keywords": list(KEYWORDS),
    }


def manifest_for(config: NpmConfigRow, version: str) -> dict:
    """Manifest for a project's npm settings; the spec version wins over the stored one."""
    return build_manifest(
        package_name=config.package_name,
        version=version,
        description=config.description,
        author=config.author,
    )


def entry_file(manifest: dict) -> str:
    return manifest.get("main") or DEFAULT_ENTRY
