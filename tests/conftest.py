"""Shared test fixtures — sample diffs, fake language servers, temp git repos."""

from __future__ import annotations

import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from scrydiff.lsp.registry import Language, LanguageRegistry

FAKE_SERVER = Path(__file__).with_name("fake_lsp_server.py")


def fake_language(mode: str = "hierarchical", *, extensions=(".go",), log: Path | None = None) -> Language:
    """A Language whose server is the scripted fake in *mode*."""
    args = [str(FAKE_SERVER), mode]
    if log is not None:
        args.append(str(log))
    return Language(name="go", extensions=list(extensions), command=sys.executable, args=args)


def make_hunk_diff(path: str, added: int, *, start: int = 1) -> str:
    """A one-hunk diff for *path* adding *added* lines at *start*."""
    body = "".join(f"+line {i}\n" for i in range(added))
    return (
        f"diff --git a/{path} b/{path}\n"
        f"index 1111111..2222222 100644\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
        f"@@ -{start},0 +{start},{added} @@\n"
        f"{body}"
    )


@pytest.fixture
def fake_registry():
    """Factory for a registry that serves .go files from the fake server."""

    def _make(mode: str = "hierarchical", log: Path | None = None) -> LanguageRegistry:
        return LanguageRegistry([fake_language(mode, log=log)])

    return _make


@pytest.fixture
def sample_diff_modified() -> str:
    """A two-hunk change to one Go file."""
    return textwrap.dedent("""\
        diff --git a/main.go b/main.go
        index 1234567..abcdefg 100644
        --- a/main.go
        +++ b/main.go
        @@ -1,3 +1,4 @@
         package main

        +import "fmt"
         func main() {}
        @@ -10,5 +11,6 @@
         func other() {
        +	fmt.Println("hello")
         }
    """)


@pytest.fixture
def sample_diff_new_file() -> str:
    return textwrap.dedent("""\
        diff --git a/new.go b/new.go
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/new.go
        @@ -0,0 +1,5 @@
        +package main
        +
        +func newFunc() {
        +	return
        +}
    """)


@pytest.fixture
def sample_diff_deleted_file() -> str:
    return textwrap.dedent("""\
        diff --git a/old.go b/old.go
        deleted file mode 100644
        index abc1234..0000000
        --- a/old.go
        +++ /dev/null
        @@ -1,3 +0,0 @@
        -package main
        -
        -func old() {}
    """)


@pytest.fixture
def sample_diff_binary() -> str:
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        Binary files a/image.png and b/image.png differ
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    """A pure rename, no content change."""
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 100%
        rename from old_name.py
        rename to new_name.py
    """)


@pytest.fixture
def sample_diff_config() -> str:
    """A small JSON change."""
    return textwrap.dedent("""\
        diff --git a/config.json b/config.json
        index 1234567..abcdefg 100644
        --- a/config.json
        +++ b/config.json
        @@ -1,3 +1,3 @@
        -{"debug": false}
        +{"debug": true,
        + "port": 8080}
    """)


@pytest.fixture
def sample_diff_mixed(sample_diff_modified, sample_diff_new_file, sample_diff_config) -> str:
    """Source, config, doc and test changes in one diff."""
    doc = make_hunk_diff("README.md", 4)
    test = make_hunk_diff("main_test.go", 6)
    return sample_diff_config + sample_diff_modified + doc + test + sample_diff_new_file


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    readme = tmp_path / "README.md"
    readme.write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    return tmp_path
