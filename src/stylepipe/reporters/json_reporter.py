from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console

from stylepipe import __version__
from stylepipe.engine.types import DiagnosticResult, Violation


def render_json(results: Sequence[DiagnosticResult]) -> str:
    """
    Render results as a JSON document keyed by filename.

    Files without violations are listed with an empty array so consumers can
    tell "checked and clean" from "not checked".
    """

    payload = {
        "tool": {"name": "stylepipe", "version": __version__},
        "files": {result.filename: [_violation_to_dict(v) for v in result.violations] for result in results},
    }
    return json.dumps(payload, indent=2, sort_keys=False)


def _violation_to_dict(v: Violation) -> dict[str, Any]:
    return {
        "rule": v.rule,
        "line": v.line,
        "column": v.column,
        "message": v.message,
    }


def report_json(results: Sequence[DiagnosticResult], *, console: Console) -> None:
    console.print(render_json(results), markup=False, highlight=False, soft_wrap=True)
