from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from stylepipe.rules.base import BaseRule

logger = logging.getLogger(__name__)

_EXPORT_NAMES = ("stylepipe_rules", "RULES")


class PluginLoadError(RuntimeError):
    """Raised when a configured plugin cannot be imported or exposes no usable rules."""


@dataclass(frozen=True, slots=True)
class PluginRef:
    """A `module` or `module:attribute` reference from the `plugins` option."""

    module: str
    attribute: str | None = None

    @classmethod
    def parse(cls, value: str) -> PluginRef:
        module, sep, attribute = value.strip().partition(":")
        if not module or (sep and not attribute):
            raise PluginLoadError(f"Invalid plugin reference {value!r}; expected `module` or `module:attr`.")
        return cls(module=module, attribute=attribute or None)

    def __str__(self) -> str:
        return self.module if self.attribute is None else f"{self.module}:{self.attribute}"


def load_plugin_rules(plugin_specs: Iterable[str]) -> list[BaseRule]:
    refs = [PluginRef.parse(raw) for raw in plugin_specs if raw.strip()]
    rules: list[BaseRule] = []
    for ref in refs:
        loaded = _rules_from(_resolve(ref), ref)
        logger.debug("plugin %s provided %d rule(s)", ref, len(loaded))
        rules.extend(loaded)
    return rules


def _resolve(ref: PluginRef) -> Any:
    try:
        module = importlib.import_module(ref.module)
    except Exception as exc:  # noqa: BLE001
        raise PluginLoadError(f"Failed to import plugin module {ref.module!r}: {exc}") from exc

    if ref.attribute is None:
        for name in _EXPORT_NAMES:
            if hasattr(module, name):
                return getattr(module, name)
        raise PluginLoadError(f"Plugin module {ref.module!r} must define `stylepipe_rules()` or `RULES`.")

    if not hasattr(module, ref.attribute):
        raise PluginLoadError(f"Plugin module {ref.module!r} has no attribute {ref.attribute!r}")
    return getattr(module, ref.attribute)


def _rules_from(export: Any, ref: PluginRef) -> list[BaseRule]:
    if isinstance(export, ModuleType):
        raise PluginLoadError(f"Plugin {ref} points at a module, not a rule export.")
    if callable(export) and not (isinstance(export, type) and issubclass(export, BaseRule)):
        export = export()

    items = list(export) if isinstance(export, list | tuple) else [export]
    rules: list[BaseRule] = []
    for item in items:
        if isinstance(item, type) and issubclass(item, BaseRule):
            item = item()
        if not isinstance(item, BaseRule):
            raise PluginLoadError(f"Plugin {ref} exported {type(item).__name__}; expected BaseRule instances.")
        rules.append(item)
    return rules
