"""Git subprocess wrapper — repo root, staged / working-tree diff, truncation."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _run_git(args: list[str], cwd: Path, timeout: int = 30) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitError(f"git error: {stderr or 'exit status ' + str(result.returncode)}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    return Path(out.strip())


def get_diff(repo_root: Path, *, all_changes: bool = False) -> str:
    """Return the staged diff, or every change against HEAD with *all_changes*."""
    args = ["diff", "HEAD", "--no-color"] if all_changes else ["diff", "--cached", "--no-color"]
    return _run_git(args, cwd=repo_root)


def truncate_diff(diff_text: str, max_lines: int) -> str:
    """Keep the first *max_lines* lines of *diff_text* and note how many were cut."""
    if max_lines <= 0 or not diff_text:
        return diff_text

    lines = diff_text.split("\n")
    if len(lines) <= max_lines:
        return diff_text

    omitted = len(lines) - max_lines
    return (
        "\n".join(lines[:max_lines])
        + f"\n\n[... {omitted} lines omitted, showing first {max_lines} of {len(lines)} total lines ...]"
    )
