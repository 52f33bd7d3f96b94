"""Best-effort JSON/YAML decoding of uploaded API specifications.

Specs arrive as raw text from file uploads, the inline editor and database
webhooks. The filename hint (when present) decides which decoder is tried;
without one, JSON is tried before YAML and the first success wins.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from specforge.errors.exceptions import ParseError
from specforge.models.enums import SpecFormat

logger = logging.getLogger(__name__)

OPENAPI_MARKER_KEYS = ("openapi", "swagger", "info", "paths")

_JSON_SUFFIXES = (".json",)
_YAML_SUFFIXES = (".yaml", ".yml")


def detect_format(text: str) -> SpecFormat:
    """Guess the serialization of a spec from its first character."""
    return SpecFormat.JSON if text.strip().startswith("{") else SpecFormat.YAML


def _load_yaml(text: str) -> Any:
    """Load YAML with the typed safe loader, retrying untyped on failure.

    The first pass keeps numbers, booleans and dates typed. The base loader
    keeps every scalar as a string, so documents with values the safe loader
    cannot construct (e.g. impossible dates, which surface as ``ValueError``)
    still decode.
    If both loaders fail the first error is raised.
    """
    try:
        return yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as first_error:
        logger.debug("Safe YAML load failed, retrying with base loader: %s", first_error)
        try:
            return yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError:
            raise first_error


def load_document(text: str) -> Any:
    """Decode text as JSON, falling back to YAML. Any value type is accepted."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return _load_yaml(text)


def _require_mapping(document: Any) -> dict:
    if not isinstance(document, dict):
        raise ParseError(
            "Specification is not an object",
            details={"type": type(document).__name__},
        )
    return document


def parse_spec(text: str, filename: str | None = None) -> dict:
    """Parse specification text into a key-ordered mapping.

    Args:
        text: Raw JSON or YAML content.
        filename: Optional filename whose extension selects the decoder.

    Returns:
        The decoded document.

    Raises:
        ParseError: If the text decodes with no decoder, or not to an object.
    """
    name = (filename or "").lower()

    try:
        if name.endswith(_JSON_SUFFIXES):
            document = json.loads(text)
        elif name.endswith(_YAML_SUFFIXES):
            document = _load_yaml(text)
        else:
            document = load_document(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ParseError(
            "Invalid API specification format. Upload a valid OpenAPI spec in JSON or YAML format.",
            details={"filename": filename, "reason": str(exc)},
        ) from exc

    document = _require_mapping(document)

    warnings = openapi_warnings(document)
    if warnings:
        logger.warning("Parsed spec looks unusual: %s", "; ".join(warnings))
    return document


def openapi_warnings(document: dict) -> list[str]:
    """Advisory checks; an empty list means the document looks like OpenAPI."""
    if any(key in document for key in OPENAPI_MARKER_KEYS):
        return []
    return [
        "none of the keys %s are present at the top level"
        % ", ".join(repr(key) for key in OPENAPI_MARKER_KEYS)
    ]
