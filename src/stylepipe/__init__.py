"""Streaming code-style checks for build pipelines."""

from __future__ import annotations

__version__ = "0.3.0"

from stylepipe.config import ConfigConflictError, ConfigError, StyleConfig, resolve_config  # noqa: E402
from stylepipe.engine.types import CheckEngine, DiagnosticResult, FixOutcome, Violation  # noqa: E402
from stylepipe.files import CheckedFile, FileReadError, SourceFile  # noqa: E402
from stylepipe.pipeline import pipe  # noqa: E402
from stylepipe.processor import FileProcessor, check  # noqa: E402
from stylepipe.reporters.dispatch import (  # noqa: E402
    ReporterConfigError,
    ReporterDispatcher,
    StyleCheckFailed,
    reporter,
)
from stylepipe.rules.plugins import PluginLoadError  # noqa: E402

__all__ = [
    "CheckEngine",
    "CheckedFile",
    "ConfigConflictError",
    "ConfigError",
    "DiagnosticResult",
    "FileProcessor",
    "FileReadError",
    "FixOutcome",
    "PluginLoadError",
    "ReporterConfigError",
    "ReporterDispatcher",
    "SourceFile",
    "StyleCheckFailed",
    "StyleConfig",
    "Violation",
    "__version__",
    "check",
    "pipe",
    "reporter",
    "resolve_config",
]
