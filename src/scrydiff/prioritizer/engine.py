"""Prioritization engine — orchestrates the full pipeline.

parse → best-effort symbol lookup per file → score every hunk → sort →
greedy fit into the line budget → rebuild the kept hunks as a diff and
summarise the rest.

Symbol lookup is an enrichment only: any language-server failure leaves
the file without symbols and scoring falls back to path-based weights.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from scrydiff.git.diff_parser import parse_diff
from scrydiff.git.models import FileDiff, Hunk, count_hunk_lines
from scrydiff.lsp.client import Deadline, LSPClient, LSPError
from scrydiff.lsp.models import DocumentSymbol
from scrydiff.lsp.registry import LanguageRegistry, default_registry
from scrydiff.prioritizer.models import (
    DEFAULT_MAX_HIGH_PRIORITY_LINES,
    SUMMARY_ORDER,
    DiffStats,
    FileCategory,
    Options,
    PrioritizedDiff,
)
from scrydiff.prioritizer.scorer import categorize_file, score_file_diff

logger = logging.getLogger(__name__)

_SUMMARY_MAX_NAMES = 3


@dataclass
class _ScoredHunk:
    hunk: Hunk
    file_index: int


def prioritize(raw_diff: str, options: Optional[Options] = None) -> PrioritizedDiff:
    """Execute the full prioritization pipeline on *raw_diff*."""
    opts = options or Options()
    budget = opts.max_high_priority_lines
    if budget <= 0:
        budget = DEFAULT_MAX_HIGH_PRIORITY_LINES

    files = parse_diff(raw_diff)
    if not files:
        # Not a diff we understand; hand it back untouched.
        return PrioritizedDiff(high_priority=raw_diff)

    # --- Symbols + scoring ---
    registry = opts.registry or default_registry()
    deadline = Deadline(opts.lsp_timeout)
    for fd in files:
        symbols: List[DocumentSymbol] = []
        if opts.enable_lsp:
            symbols = get_symbols_for_file(fd, opts.work_dir, registry, deadline)
        score_file_diff(fd, symbols)

    # --- Sort (stable) and fit the budget ---
    ranked = [
        _ScoredHunk(hunk=h, file_index=i)
        for i, fd in enumerate(files)
        for h in fd.hunks
    ]
    ranked.sort(key=lambda sh: sh.hunk.score, reverse=True)

    high, low = _partition(ranked, budget)

    summary = ""
    if opts.include_summary and low:
        summary = build_summary([sh.hunk for sh in low])

    return PrioritizedDiff(
        high_priority=build_high_priority_diff(high, files),
        summary=summary,
        stats=compute_stats(files),
    )


def _partition(
    ranked: List[_ScoredHunk], budget: int
) -> Tuple[List[_ScoredHunk], List[_ScoredHunk]]:
    """Greedy fit: stop admitting at the first hunk that overflows *budget*."""
    used = 0
    for idx, sh in enumerate(ranked):
        lines = count_hunk_lines(sh.hunk)
        if used + lines > budget:
            return ranked[:idx], ranked[idx:]
        used += lines
    return ranked, []


def _resolve_path(fd: FileDiff, work_dir: Optional[Path]) -> Path:
    path = Path(fd.new_path)
    if work_dir is not None:
        path = Path(work_dir) / path
    return path.resolve()


def get_symbols_for_file(
    fd: FileDiff,
    work_dir: Optional[Path],
    registry: LanguageRegistry,
    deadline: Deadline,
) -> List[DocumentSymbol]:
    """Ask a language server for the outline of *fd*'s new version.

    Returns an empty list whenever that is not possible.
    """
    if fd.is_binary or fd.is_delete:
        return []
    if deadline.expired():
        logger.debug("Symbol lookup budget spent, skipping %s", fd.new_path)
        return []

    lang = registry.detect(fd.new_path)
    if lang is None or not lang.available():
        return []

    path = _resolve_path(fd, work_dir)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return []

    uri = path.as_uri()
    try:
        with LSPClient(lang) as client:
            client.initialize(path.parent, deadline=deadline)
            client.open_document(uri, lang.name, content)
            try:
                return client.document_symbols(uri, deadline=deadline)
            finally:
                client.close_document(uri)
    except LSPError as exc:
        logger.debug("No symbols for %s from %s: %s", fd.new_path, lang.command, exc)
        return []


def build_high_priority_diff(hunks: List[_ScoredHunk], files: List[FileDiff]) -> str:
    """Rebuild a unified diff holding only *hunks*, in original file order."""
    if not hunks:
        return ""

    by_file: Dict[int, List[Hunk]] = defaultdict(list)
    for sh in hunks:
        by_file[sh.file_index].append(sh.hunk)

    parts: List[str] = []
    for idx, fd in enumerate(files):
        kept = by_file.get(idx)
        if not kept:
            continue
        kept.sort(key=lambda h: h.new_start)

        parts.append(f"diff --git a/{fd.old_path} b/{fd.new_path}\n")
        if fd.is_new:
            parts.append("new file mode 100644\n")
        if fd.is_delete:
            parts.append("deleted file mode 100644\n")

        old_marker = "/dev/null" if fd.is_new else f"a/{fd.old_path}"
        new_marker = "/dev/null" if fd.is_delete else f"b/{fd.new_path}"
        parts.append(f"--- {old_marker}\n")
        parts.append(f"+++ {new_marker}\n")
        parts.extend(h.content for h in kept)

    return "".join(parts)


def build_summary(hunks: List[Hunk]) -> str:
    """One line per category: file count, changed lines, a few file names."""
    if not hunks:
        return ""

    per_category: Dict[FileCategory, Dict[str, int]] = defaultdict(dict)
    for hunk in hunks:
        files = per_category[categorize_file(hunk.file_path)]
        files[hunk.file_path] = files.get(hunk.file_path, 0) + count_hunk_lines(hunk)

    lines: List[str] = []
    for category in SUMMARY_ORDER:
        files = per_category.get(category)
        if not files:
            continue
        total = sum(files.values())
        names = sorted(Path(f).name for f in files)
        if len(names) > _SUMMARY_MAX_NAMES:
            names = names[:_SUMMARY_MAX_NAMES] + ["..."]
        lines.append(
            f"{len(files)} {category.value} file(s) ({total} lines): {', '.join(names)}"
        )

    if not lines:
        return ""
    return "\n[Also modified]\n- " + "\n- ".join(lines)


def compute_stats(files: List[FileDiff]) -> DiffStats:
    """Per-category file and line totals over every parsed file."""
    counts: Dict[str, int] = defaultdict(int)
    for fd in files:
        lines = fd.changed_lines
        counts["total_files"] += 1
        counts["total_lines"] += lines
        category = categorize_file(fd.new_path)
        if category is FileCategory.UNKNOWN:
            continue
        counts[f"{category.value}_files"] += 1
        counts[f"{category.value}_lines"] += lines
    return DiffStats(**counts)


def format_for_prompt(result: PrioritizedDiff) -> str:
    """Flatten *result* into the text handed to the model."""
    return result.high_priority + result.summary
