"""Unified diff parser — turns ``git diff`` output into FileDiff / Hunk models.

Handles new, deleted, renamed and binary files. Hunk text is kept verbatim
so a diff can be reassembled from a subset of its hunks.
"""

from __future__ import annotations

import re
from typing import List, Optional

from scrydiff.git.models import FileDiff, Hunk

# --- Regex patterns for diff parsing ---

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@"
)
_BINARY_RE = re.compile(r"^Binary files .+ differ$")
_NEW_FILE_RE = re.compile(r"^new file mode")
_DELETED_FILE_RE = re.compile(r"^deleted file mode")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")


def _to_int(value: Optional[str], default: int) -> int:
    """Convert a regex capture, falling back to *default* when absent."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class DiffParser:
    """Parse unified diff text into a list of FileDiff objects.

    Usage::

        files = DiffParser(diff_text).parse()
        for fd in files:
            for hunk in fd.hunks:
                ...
    """

    def __init__(self, diff_text: str) -> None:
        self._text = diff_text

    def parse(self) -> List[FileDiff]:
        if not self._text:
            return []

        files: List[FileDiff] = []
        current_file: Optional[FileDiff] = None
        current_hunk: Optional[Hunk] = None
        hunk_lines: List[str] = []

        def flush_hunk() -> None:
            nonlocal current_hunk
            if current_hunk is not None and current_file is not None:
                current_hunk.content = "".join(hunk_lines)
                current_file.hunks.append(current_hunk)
            current_hunk = None
            hunk_lines.clear()

        def flush_file() -> None:
            nonlocal current_file
            flush_hunk()
            if current_file is not None:
                files.append(current_file)
            current_file = None

        for line in self._text.split("\n"):
            # --- diff --git header → new file context ---
            m = _DIFF_HEADER_RE.match(line)
            if m:
                flush_file()
                current_file = FileDiff(old_path=m.group(1), new_path=m.group(2))
                continue

            # Preamble before the first header (commit message, stat block)
            if current_file is None:
                continue

            # --- File-level markers ---
            if _BINARY_RE.match(line):
                current_file.is_binary = True
                continue
            if _NEW_FILE_RE.match(line):
                current_file.is_new = True
                continue
            if _DELETED_FILE_RE.match(line):
                current_file.is_delete = True
                continue
            if _RENAME_FROM_RE.match(line) or _RENAME_TO_RE.match(line):
                current_file.is_rename = True
                continue

            # --- Hunk header ---
            hm = _HUNK_HEADER_RE.match(line)
            if hm:
                flush_hunk()
                current_hunk = Hunk(
                    file_path=current_file.new_path,
                    old_start=_to_int(hm.group(1), 1),
                    old_count=_to_int(hm.group(2), 1),
                    new_start=_to_int(hm.group(3), 1),
                    new_count=_to_int(hm.group(4), 1),
                )
                hunk_lines.append(line + "\n")
                continue

            # --- Hunk body (index, ---/+++ lines before the first hunk are dropped) ---
            if current_hunk is not None:
                hunk_lines.append(line + "\n")

        flush_file()
        return files


def parse_diff(diff_text: str) -> List[FileDiff]:
    """Parse *diff_text*; an empty string yields an empty list."""
    return DiffParser(diff_text).parse()
