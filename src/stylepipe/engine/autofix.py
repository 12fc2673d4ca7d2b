from __future__ import annotations

import difflib
from collections.abc import Sequence
from pathlib import Path

from stylepipe.engine.types import Violation
from stylepipe.rules.base import TextEdit


def apply_edits(text: str, planned: Sequence[tuple[Violation, Sequence[TextEdit]]]) -> tuple[str, list[Violation]]:
    """
    Apply each violation's edits to `text` as a unit.

    A violation whose edits overlap an already accepted edit is skipped for
    this pass; the caller re-checks and retries it on the updated text.
    Returns the updated text and the violations whose edits were applied.
    """

    accepted: list[TextEdit] = []
    applied: list[Violation] = []
    for violation, edits in planned:
        if not edits:
            continue
        if any(_overlaps(edit, other) for edit in edits for other in accepted):
            continue
        accepted.extend(edits)
        applied.append(violation)

    updated = text
    for edit in sorted(accepted, key=lambda e: (e.start, e.end), reverse=True):
        updated = updated[: edit.start] + edit.replacement + updated[edit.end :]
    return updated, applied


def _overlaps(a: TextEdit, b: TextEdit) -> bool:
    if a.start == a.end == b.start == b.end:
        # Two insertions at the same point would be applied in arbitrary order.
        return True
    return a.start < b.end and b.start < a.end


def unified_diff(before: str, after: str, *, path: Path | str) -> str:
    if before == after:
        return ""
    name = Path(path).as_posix()
    diff = difflib.unified_diff(
        _diff_lines(before),
        _diff_lines(after),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
    )
    return "".join(diff)


def _diff_lines(text: str) -> list[str]:
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n\\ No newline at end of file\n"
    return lines
