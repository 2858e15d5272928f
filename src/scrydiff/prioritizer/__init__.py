"""Prioritizer — hunk scoring, budgeting, and diff reconstruction."""

from scrydiff.prioritizer.engine import format_for_prompt, prioritize
from scrydiff.prioritizer.models import (
    DiffStats,
    FileCategory,
    Options,
    PrioritizedDiff,
    default_options,
)
from scrydiff.prioritizer.scorer import categorize_file, overlaps, score_hunk

__all__ = [
    "DiffStats",
    "FileCategory",
    "Options",
    "PrioritizedDiff",
    "categorize_file",
    "default_options",
    "format_for_prompt",
    "overlaps",
    "prioritize",
    "score_hunk",
]
