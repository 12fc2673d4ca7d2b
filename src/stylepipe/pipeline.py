from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

Stage = Callable[[Iterable[Any]], Iterable[Any]]


def pipe(source: Iterable[Any], *stages: Stage) -> Iterator[Any]:
    """
    Chain `stages` over `source`, lazily.

    Nothing runs until the returned iterator is consumed; each stage pulls
    from the previous one, so a stage that stops iterating stops its
    upstream as well.
    """

    stream: Iterable[Any] = source
    for stage in stages:
        stream = stage(stream)
    return iter(stream)
