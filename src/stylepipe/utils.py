from __future__ import annotations

import re
from pathlib import Path

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def safe_relpath(path: Path, root: Path) -> str:
    """
    Return a stable, POSIX-style path for reporting output.

    Prefer a path relative to `root` when possible.
    Fall back to `path.as_posix()` when the path is not under the root, or when
    either path cannot be resolved due to OS errors.
    """

    try:
        resolved_path = path.resolve()
    except OSError:
        resolved_path = path

    try:
        resolved_root = root.resolve()
    except OSError:
        resolved_root = root

    try:
        return resolved_path.relative_to(resolved_root).as_posix()
    except ValueError:
        return path.as_posix()


def normalize_key(value: str) -> str:
    """
    Canonicalize an option or rule name to snake_case.

    `configPath`, `config-path` and `config_path` all map to `config_path`.
    """

    return _CAMEL_BOUNDARY_RE.sub("_", value.strip()).replace("-", "_").lower()
