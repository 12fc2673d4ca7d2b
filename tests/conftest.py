from __future__ import annotations

import json
from pathlib import Path

import pytest

RC_CONTENTS = {
    "disallowMultipleVarDecl": True,
    "disallowSpacesInsideObjectBrackets": "all",
    "excludeFiles": ["excluded.js"],
}


@pytest.fixture()
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / ".stylepiperc").write_text(json.dumps(RC_CONTENTS), encoding="utf-8")
    return tmp_path
