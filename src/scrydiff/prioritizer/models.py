"""Prioritization models — options, categories, stats, result."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from scrydiff.lsp.registry import LanguageRegistry

DEFAULT_MAX_HIGH_PRIORITY_LINES = 400
DEFAULT_LSP_TIMEOUT = 5.0


class FileCategory(str, Enum):
    SOURCE = "source"
    TEST = "test"
    CONFIG = "config"
    DOC = "doc"
    GENERATED = "generated"
    UNKNOWN = "unknown"

    @property
    def multiplier(self) -> float:
        return _CATEGORY_MULTIPLIER[self]


_CATEGORY_MULTIPLIER = {
    FileCategory.SOURCE: 1.0,
    FileCategory.TEST: 0.6,
    FileCategory.CONFIG: 0.4,
    FileCategory.DOC: 0.2,
    FileCategory.GENERATED: 0.1,
    FileCategory.UNKNOWN: 0.5,
}

# Order in which left-out changes are listed.
SUMMARY_ORDER = (
    FileCategory.TEST,
    FileCategory.CONFIG,
    FileCategory.DOC,
    FileCategory.GENERATED,
    FileCategory.SOURCE,
    FileCategory.UNKNOWN,
)


@dataclass
class Options:
    """Knobs for :func:`scrydiff.prioritizer.engine.prioritize`."""

    max_high_priority_lines: int = DEFAULT_MAX_HIGH_PRIORITY_LINES
    include_summary: bool = True
    lsp_timeout: float = DEFAULT_LSP_TIMEOUT  # one budget for the whole batch
    work_dir: Optional[Path] = None  # root for relative diff paths
    enable_lsp: bool = True
    registry: Optional[LanguageRegistry] = None  # built-in table when None


def default_options() -> Options:
    return Options()


@dataclass(frozen=True)
class DiffStats:
    total_files: int = 0
    total_lines: int = 0
    source_files: int = 0
    source_lines: int = 0
    test_files: int = 0
    test_lines: int = 0
    config_files: int = 0
    config_lines: int = 0
    doc_files: int = 0
    doc_lines: int = 0
    generated_files: int = 0
    generated_lines: int = 0


@dataclass(frozen=True)
class PrioritizedDiff:
    """Result of one prioritization run."""

    high_priority: str = ""  # diff text for the hunks that fit the budget
    summary: str = ""  # one line per category of what was left out
    stats: DiffStats = field(default_factory=DiffStats)
