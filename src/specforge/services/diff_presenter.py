"""Normalize two spec (or client code) blobs and compare them line by line."""

from __future__ import annotations

import difflib
import json
import logging
from dataclasses import asdict, dataclass, field

import yaml

from specforge.models.enums import DiffView, SpecFormat
from specforge.services.spec_parser import load_document

logger = logging.getLogger(__name__)

NOTHING_TO_COMPARE = "No specs to compare"


@dataclass
class DiffRow:
    """One aligned row of a split view."""

    tag: str  # equal | replace | insert | delete
    old_lineno: int | None
    old_text: str | None
    new_lineno: int | None
    new_text: str | None


@dataclass
class SpecDiff:
    format: str
    view: str
    old_formatted: str = ""
    new_formatted: str = ""
    identical: bool = False
    empty: bool = False
    message: str | None = None
    additions: int = 0
    deletions: int = 0
    rows: list[DiffRow] = field(default_factory=list)
    unified: list[str] = field(default_factory=list)

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> dict:
        data = asdict(self)
        data["changes"] = self.changes
        return data


def normalize(text: str | None, fmt: SpecFormat) -> str:
    """Pretty-print ``text`` in ``fmt``; on any decoding failure return it unchanged."""
    if not text:
        return ""
    if fmt == SpecFormat.TEXT:
        return text
    try:
        document = load_document(text)
        if fmt == SpecFormat.JSON:
            return json.dumps(document, indent=2, ensure_ascii=False, default=str)
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)
    except (ValueError, TypeError, yaml.YAMLError) as exc:
        logger.debug("Could not normalize blob as %s, showing raw text: %s", fmt, exc)
        return text


def _split_rows(old_lines: list[str], new_lines: list[str]) -> tuple[list[DiffRow], int, int]:
    rows: list[DiffRow] = []
    additions = deletions = 0
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                rows.append(DiffRow("equal", i1 + offset + 1, old_lines[i1 + offset], j1 + offset + 1, new_lines[j1 + offset]))
            continue

        old_chunk = range(i1, i2) if tag in ("replace", "delete") else range(0)
        new_chunk = range(j1, j2) if tag in ("replace", "insert") else range(0)
        deletions += len(old_chunk)
        additions += len(new_chunk)

        # replaced blocks are paired side by side, leftovers padded
        for k in range(max(len(old_chunk), len(new_chunk))):
            oi = old_chunk[k] if k < len(old_chunk) else None
            ni = new_chunk[k] if k < len(new_chunk) else None
            if oi is not None and ni is not None:
                row_tag = "replace"
            elif oi is not None:
                row_tag = "delete"
            else:
                row_tag = "insert"
            rows.append(
                DiffRow(
                    row_tag,
                    oi + 1 if oi is not None else None,
                    old_lines[oi] if oi is not None else None,
                    ni + 1 if ni is not None else None,
                    new_lines[ni] if ni is not None else None,
                )
            )
    return rows, additions, deletions


def present_diff(
    old: str | None,
    new: str | None,
    fmt: SpecFormat | str = SpecFormat.JSON,
    view: DiffView | str = DiffView.SPLIT,
    old_label: str = "old",
    new_label: str = "new",
) -> SpecDiff:
    """Compare two blobs after normalizing them to ``fmt``.

    Missing blobs are treated as empty; if both are missing the result is
    flagged ``empty`` instead of failing.
    """
    fmt = SpecFormat(fmt)
    view = DiffView(view)

    if not old and not new:
        return SpecDiff(format=fmt.value, view=view.value, empty=True, message=NOTHING_TO_COMPARE)

    old_formatted = normalize(old, fmt)
    new_formatted = normalize(new, fmt)
    old_lines = old_formatted.splitlines()
    new_lines = new_formatted.splitlines()

    rows, additions, deletions = _split_rows(old_lines, new_lines)
    result = SpecDiff(
        format=fmt.value,
        view=view.value,
        old_formatted=old_formatted,
        new_formatted=new_formatted,
        identical=old_formatted == new_formatted,
        additions=additions,
        deletions=deletions,
    )

    if view == DiffView.SPLIT:
        result.rows = rows
    else:
        result.unified = list(
            difflib.unified_diff(old_lines, new_lines, fromfile=old_label, tofile=new_label, lineterm="")
        )
    return result
