"""Data models for diff parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Hunk:
    """A single ``@@`` block of a unified diff.

    ``content`` holds the raw hunk text (header line included, every line
    newline-terminated) and is reused verbatim when a diff is rebuilt.
    ``score`` and ``symbols`` are filled in by the scorer.
    """

    file_path: str
    old_start: int = 1
    old_count: int = 1
    new_start: int = 1
    new_count: int = 1
    content: str = ""
    score: float = 0.0
    symbols: List[str] = field(default_factory=list)

    @property
    def new_end(self) -> int:
        """Last line (inclusive) of the changed range in the new file."""
        return self.new_start + self.new_count - 1


@dataclass
class FileDiff:
    """All hunks for one ``diff --git`` section."""

    old_path: str
    new_path: str
    hunks: List[Hunk] = field(default_factory=list)
    is_binary: bool = False
    is_new: bool = False
    is_delete: bool = False
    is_rename: bool = False

    @property
    def changed_lines(self) -> int:
        return sum(count_hunk_lines(h) for h in self.hunks)


def _is_changed_line(line: str) -> bool:
    if line.startswith("+"):
        return not line.startswith("+++")
    if line.startswith("-"):
        return not line.startswith("---")
    return False


def count_lines(diff_text: str) -> int:
    """Count added and removed lines in *diff_text*, ignoring path markers."""
    return sum(1 for line in diff_text.split("\n") if _is_changed_line(line))


def count_hunk_lines(hunk: Optional[Hunk]) -> int:
    """Count the changed lines of a single hunk."""
    if hunk is None:
        return 0
    return count_lines(hunk.content)
