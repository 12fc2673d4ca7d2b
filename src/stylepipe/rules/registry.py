from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType

from stylepipe.rules.base import BaseRule
from stylepipe.rules.plugins import PluginLoadError
from stylepipe.rules.style import builtin_style_rules

_RULE_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[BaseRule, ...]:
    by_name: dict[str, BaseRule] = {}
    for rule in builtin_style_rules():
        name = rule.meta.name
        if not _RULE_NAME_RE.match(name):  # pragma: no cover
            raise RuntimeError(f"Rule name must be snake_case: {name!r}")
        if name in by_name:  # pragma: no cover
            raise RuntimeError(f"Duplicate rule name: {name}")
        by_name[name] = rule
    return tuple(by_name[k] for k in sorted(by_name))


def available_rules(extra: Iterable[BaseRule] = ()) -> Mapping[str, BaseRule]:
    """
    Built-in rules plus plugin rules, keyed by name.

    Plugin rules may not shadow a built-in rule or each other.
    """

    by_name = {r.meta.name: r for r in builtin_rules()}
    builtin_names = set(by_name)
    seen: set[str] = set()
    for rule in extra:
        name = rule.meta.name
        if not _RULE_NAME_RE.match(name):
            raise PluginLoadError(f"Plugin rule name must be snake_case: {name!r}")
        if name in builtin_names:
            raise PluginLoadError(f"Plugin rule name conflicts with built-in rule: {name}")
        if name in seen:
            raise PluginLoadError(f"Duplicate plugin rule name: {name}")
        seen.add(name)
        by_name[name] = rule
    return MappingProxyType(dict(sorted(by_name.items())))
