from __future__ import annotations

import json
from pathlib import Path

import pytest
from helpers import make_source

from stylepipe import ConfigError, PluginLoadError, check, pipe, resolve_config

PLUGIN_SOURCE = """
from __future__ import annotations

from stylepipe.rules.base import BaseRule, RuleMeta


class NoDebugger(BaseRule):
    meta = RuleMeta(
        name="no_debugger",
        title="Unexpected debugger statement",
        description="A test plugin rule.",
    )

    def check_file(self, ctx, option):
        offset = ctx.code.find("debugger")
        if offset == -1:
            return []
        return [self._violation(ctx, offset)]


def stylepipe_rules():
    return [NoDebugger()]
""".lstrip()


def _write_plugin(tmp_path: Path, monkeypatch, name: str, source: str) -> None:
    (tmp_path / f"{name}.py").write_text(source, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))


def test_plugin_rules_are_loaded_and_reported(tmp_path: Path, monkeypatch) -> None:
    _write_plugin(tmp_path, monkeypatch, "sp_plugin_ok", PLUGIN_SOURCE)
    (tmp_path / ".stylepiperc").write_text(
        json.dumps({"plugins": ["sp_plugin_ok"], "noDebugger": True}),
        encoding="utf-8",
    )

    files = [make_source(tmp_path, "app.js", "function f() {\n  debugger;\n}\n")]
    [checked] = pipe(files, check(cwd=tmp_path))

    assert checked.result is not None
    [violation] = checked.result.violations
    assert violation.rule == "no_debugger"
    assert (violation.line, violation.column) == (2, 2)


def test_plugin_rule_requires_plugin_to_be_listed(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Unsupported rule: `no_debugger`"):
        resolve_config({"noDebugger": True}, cwd=tmp_path)


def test_missing_plugin_module(tmp_path: Path) -> None:
    with pytest.raises(PluginLoadError, match="Failed to import"):
        resolve_config({"plugins": ["sp_plugin_does_not_exist"]}, cwd=tmp_path)


def test_plugin_without_rules_export(tmp_path: Path, monkeypatch) -> None:
    _write_plugin(tmp_path, monkeypatch, "sp_plugin_empty", "X = 1\n")
    with pytest.raises(PluginLoadError, match="stylepipe_rules"):
        resolve_config({"plugins": ["sp_plugin_empty"]}, cwd=tmp_path)


def test_plugin_rule_cannot_shadow_builtin(tmp_path: Path, monkeypatch) -> None:
    source = PLUGIN_SOURCE.replace('name="no_debugger"', 'name="maximum_line_length"')
    _write_plugin(tmp_path, monkeypatch, "sp_plugin_shadow", source)
    with pytest.raises(PluginLoadError, match="conflicts with built-in"):
        resolve_config({"plugins": ["sp_plugin_shadow"]}, cwd=tmp_path)


def test_plugin_attribute_spec(tmp_path: Path, monkeypatch) -> None:
    _write_plugin(tmp_path, monkeypatch, "sp_plugin_attr", PLUGIN_SOURCE + "\nEXTRA = stylepipe_rules\n")
    cfg = resolve_config({"plugins": ["sp_plugin_attr:EXTRA"], "noDebugger": True}, cwd=tmp_path)
    assert [r.meta.name for r in cfg.plugin_rules] == ["no_debugger"]
    assert cfg.rules["no_debugger"] is True


def test_plugin_may_export_rule_classes(tmp_path: Path, monkeypatch) -> None:
    source = PLUGIN_SOURCE.replace("return [NoDebugger()]", "return [NoDebugger]")
    _write_plugin(tmp_path, monkeypatch, "sp_plugin_classes", source)
    cfg = resolve_config({"plugins": ["sp_plugin_classes"]}, cwd=tmp_path)
    assert [r.meta.name for r in cfg.plugin_rules] == ["no_debugger"]


def test_invalid_plugin_reference(tmp_path: Path) -> None:
    with pytest.raises(PluginLoadError, match="Invalid plugin reference"):
        resolve_config({"plugins": ["sp_plugin_ok:"]}, cwd=tmp_path)
