from __future__ import annotations

import fnmatch
import json
import logging
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from stylepipe.rules.base import BaseRule
from stylepipe.rules.plugins import load_plugin_rules
from stylepipe.rules.registry import available_rules
from stylepipe.utils import normalize_key

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when stylepipe options or a configuration file are invalid."""


class ConfigConflictError(ConfigError):
    """Raised when options that cannot be combined are supplied together."""


CONFIG_FILENAMES: tuple[str, ...] = (".stylepiperc", ".stylepiperc.json")
PYPROJECT_FILENAME = "pyproject.toml"

# Options that may accompany `config_path`. Everything else configures style
# rules and must come from exactly one place.
_INVOCATION_KEYS = frozenset({"config_path", "esnext", "fix"})
_SETTING_KEYS = frozenset({"preset", "exclude_files", "plugins", "esnext"})

PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "airbnb": MappingProxyType(
            {
                "disallow_keywords": ["with"],
                "disallow_multiple_var_decl": True,
                "disallow_trailing_whitespace": True,
                "maximum_line_length": 100,
                "require_line_feed_at_file_end": True,
                "validate_quote_marks": "'",
            }
        ),
        "google": MappingProxyType(
            {
                "disallow_keywords": ["with"],
                "disallow_multiple_var_decl": True,
                "disallow_trailing_whitespace": True,
                "maximum_line_length": 80,
                "require_line_feed_at_file_end": True,
                "validate_quote_marks": "'",
            }
        ),
        "jquery": MappingProxyType(
            {
                "disallow_keywords": ["with"],
                "disallow_trailing_whitespace": "ignore_empty_lines",
                "maximum_line_length": 100,
                "require_line_feed_at_file_end": True,
                "validate_quote_marks": '"',
            }
        ),
    }
)


@dataclass(frozen=True, slots=True)
class StyleConfig:
    rules: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    exclude_files: tuple[str, ...] = ()
    exclude_root: Path = field(default_factory=Path.cwd)
    esnext: bool = False
    fix: bool = False
    preset: str | None = None
    config_path: Path | None = None
    plugins: tuple[str, ...] = ()
    plugin_rules: tuple[BaseRule, ...] = field(default=(), repr=False, compare=False)

    def is_excluded(self, path: Path) -> bool:
        return path_is_excluded(path, root=self.exclude_root, patterns=self.exclude_files)


def resolve_config(options: Mapping[str, Any] | None = None, *, cwd: Path | str | None = None) -> StyleConfig:
    """
    Merge caller options into one immutable `StyleConfig`.

    - `config_path` loads rules from that file; it cannot be combined with
      `preset` or inline rule options.
    - `preset` and inline rule options are used as-is (inline rules win).
    - With neither, a config file is discovered in `cwd`.

    `esnext` and `fix` combine with any of the above. The `options` mapping is
    never modified.
    """

    base_dir = Path.cwd() if cwd is None else Path(cwd)
    normalized = _normalize_options(options)

    inline = {k: v for k, v in normalized.items() if k not in _INVOCATION_KEYS}
    config_path_raw = normalized.get("config_path")
    if config_path_raw is not None and inline:
        # `options` already passed validation in `_normalize_options`.
        raw_names = {normalize_key(key): key for key in (options or {})}
        conflicting = ", ".join(f"`{raw_names[name]}`" for name in sorted(inline))
        raise ConfigConflictError(
            f"`{raw_names['config_path']}` cannot be combined with inline style options ({conflicting}); "
            "move them into the configuration file."
        )

    esnext = _validate_optional_bool(normalized.get("esnext"), field_name="esnext")
    fix = _validate_optional_bool(normalized.get("fix"), field_name="fix")

    config_path: Path | None
    if config_path_raw is not None:
        if not isinstance(config_path_raw, str | Path):
            raise ConfigError("`config_path` must be a path.")
        config_path = Path(config_path_raw)
        if not config_path.is_absolute():
            config_path = base_dir / config_path
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found: {config_path}")
        table = load_config_file(config_path)
    elif inline:
        config_path = None
        table = inline
    else:
        config_path = discover_config_file(base_dir)
        table = load_config_file(config_path) if config_path is not None else {}

    root = config_path.parent if config_path is not None else base_dir
    config = _build_config(table, root=root, config_path=config_path, esnext=esnext, fix=bool(fix))
    logger.debug(
        "resolved configuration from %s: %d rule(s)%s%s",
        config_path or ("options" if inline else "defaults"),
        len(config.rules),
        ", esnext" if config.esnext else "",
        ", fix" if config.fix else "",
    )
    return config


def discover_config_file(directory: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate

    pyproject = directory / PYPROJECT_FILENAME
    if pyproject.is_file() and _pyproject_table(pyproject):
        return pyproject
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read a configuration table from a JSON rc file, a TOML file, or the
    `[tool.stylepipe]` table of a `pyproject.toml`.
    """

    if path.name == PYPROJECT_FILENAME:
        return _pyproject_table(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    if path.suffix == ".toml":
        try:
            data: Any = tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    else:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a table/object.")
    return data


def _pyproject_table(path: Path) -> dict[str, Any]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    tool_table = data.get("tool", {})
    if not isinstance(tool_table, dict):
        return {}
    table = tool_table.get("stylepipe", {})
    if not isinstance(table, dict):
        raise ConfigError("`tool.stylepipe` must be a table.")
    return table


def _normalize_options(options: Mapping[str, Any] | None) -> dict[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ConfigError(f"Options must be a mapping, got {type(options).__name__}.")

    out: dict[str, Any] = {}
    for raw_key, value in options.items():
        if not isinstance(raw_key, str):
            raise ConfigError(f"Option names must be strings, got {raw_key!r}.")
        key = normalize_key(raw_key)
        if key in out:
            raise ConfigError(f"Option `{raw_key}` is given more than once (as `{key}`).")
        out[key] = value
    return out


def _build_config(
    table: Mapping[str, Any],
    *,
    root: Path,
    config_path: Path | None,
    esnext: bool | None,
    fix: bool,
) -> StyleConfig:
    settings = _normalize_options(table)
    if "fix" in settings or "config_path" in settings:
        key = "fix" if "fix" in settings else "config_path"
        raise ConfigError(f"`{key}` is an invocation option and cannot appear in a configuration file.")

    preset = _parse_preset(settings.get("preset"))
    exclude_files = _validate_str_list(settings.get("exclude_files"), field_name="exclude_files")
    plugins = _validate_str_list(settings.get("plugins"), field_name="plugins")
    file_esnext = _validate_optional_bool(settings.get("esnext"), field_name="esnext")

    plugin_rules = tuple(load_plugin_rules(plugins))
    available = available_rules(plugin_rules)

    merged: dict[str, Any] = {}
    if preset is not None:
        merged.update(PRESETS[preset])
    merged.update({k: v for k, v in settings.items() if k not in _SETTING_KEYS})

    rules: dict[str, Any] = {}
    for name, value in merged.items():
        if value is None or value is False:
            # Explicitly disabled (e.g. turning off a preset rule).
            continue
        rule = available.get(name)
        if rule is None:
            valid = ", ".join(sorted(available))
            raise ConfigError(f"Unsupported rule: `{name}`. Available rules: {valid}.")
        try:
            rules[name] = rule.configure(value)
        except ValueError as exc:
            raise ConfigError(f"`{name}` {exc}.") from exc

    return StyleConfig(
        rules=MappingProxyType(rules),
        exclude_files=exclude_files,
        exclude_root=root,
        esnext=esnext if esnext is not None else bool(file_esnext),
        fix=fix,
        preset=preset,
        config_path=config_path,
        plugins=plugins,
        plugin_rules=plugin_rules,
    )


def _parse_preset(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError("`preset` must be a string.")
    name = value.strip().lower()
    if name not in PRESETS:
        valid = ", ".join(sorted(PRESETS))
        raise ConfigError(f"Unknown preset {value!r}. Valid presets: {valid}.")
    return name


def _validate_str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list | tuple) or any(not isinstance(v, str) for v in value):
        raise ConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(v.strip() for v in value)


def _validate_optional_bool(value: Any, *, field_name: str) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ConfigError(f"`{field_name}` must be a boolean.")
    return value


def path_is_excluded(path: Path, *, root: Path, patterns: Iterable[str]) -> bool:
    """
    Return True if `path` matches any exclude pattern.

    Patterns are evaluated against the POSIX-style path relative to `root`
    (the directory of the configuration file, or the working directory for
    inline options). Relative `path`s are taken relative to `root`.

    Supported patterns:
    - Directory prefixes: "vendor/" matches "vendor/...".
    - Globs without slashes: "*.min.js" matches basenames.
    - Globs with slashes: "lib/**/generated/*.js" matches full relative paths.
    """

    if not path.is_absolute():
        path = root / path

    try:
        relative = path.resolve().relative_to(root.resolve())
    except (ValueError, OSError, RuntimeError):
        # Files outside the root are never excluded implicitly.
        return False

    rel_posix = relative.as_posix()
    basename = relative.name

    for raw_pattern in patterns:
        pattern = raw_pattern.strip().replace("\\", "/")
        if not pattern:
            continue
        if pattern.startswith("./"):
            pattern = pattern[2:]

        if pattern.endswith("/"):
            if rel_posix.startswith(pattern):
                return True
            continue

        if "/" in pattern:
            if fnmatch.fnmatch(rel_posix, pattern):
                return True
        elif fnmatch.fnmatch(basename, pattern) or fnmatch.fnmatch(rel_posix, pattern):
            return True

    return False
