"""Git interface layer — adapter, diff parsing, models."""

from scrydiff.git.adapter import GitError, get_diff, get_repo_root, truncate_diff
from scrydiff.git.diff_parser import DiffParser, parse_diff
from scrydiff.git.models import FileDiff, Hunk, count_hunk_lines, count_lines

__all__ = [
    "DiffParser",
    "FileDiff",
    "GitError",
    "Hunk",
    "count_hunk_lines",
    "count_lines",
    "get_diff",
    "get_repo_root",
    "parse_diff",
    "truncate_diff",
]
