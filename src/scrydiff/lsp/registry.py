"""Language registry — maps file extensions to language-server commands.

Built-in servers cover the common toolchains; extra servers can be declared
in YAML files under ``.scrydiff-servers/`` and are consulted first.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import yaml

from scrydiff.config.schema import ScryDiffConfig

logger = logging.getLogger(__name__)


@dataclass
class Language:
    """A language and the server that understands it."""

    name: str
    extensions: List[str]
    command: str
    args: List[str] = field(default_factory=list)

    def matches(self, path: str) -> bool:
        ext = Path(path).suffix.lower()
        return bool(ext) and ext in self.extensions

    def available(self) -> bool:
        """True if the server binary is on PATH. Not cached."""
        return shutil.which(self.command) is not None


BUILTIN_LANGUAGES: List[Language] = [
    Language("go", [".go"], "gopls"),
    Language("python", [".py"], "pyright-langserver", ["--stdio"]),
    Language("rust", [".rs"], "rust-analyzer"),
    Language("csharp", [".cs"], "OmniSharp", ["--languageserver"]),
    Language(
        "typescript",
        [".ts", ".tsx", ".js", ".jsx"],
        "typescript-language-server",
        ["--stdio"],
    ),
    Language("html", [".html", ".htm"], "vscode-html-language-server", ["--stdio"]),
    Language("json", [".json"], "vscode-json-language-server", ["--stdio"]),
    Language("yaml", [".yaml", ".yml"], "yaml-language-server", ["--stdio"]),
    Language("nix", [".nix"], "nil"),
    Language("lua", [".lua"], "lua-language-server"),
]


class LanguageRegistry:
    """Ordered language table; the first language matching a path wins."""

    def __init__(self, languages: Optional[List[Language]] = None) -> None:
        self._languages: List[Language] = list(languages or [])

    # ---- registration ----

    def register(self, language: Language, *, first: bool = False) -> None:
        if first:
            self._languages.insert(0, language)
        else:
            self._languages.append(language)

    # ---- queries ----

    @property
    def all_languages(self) -> List[Language]:
        return list(self._languages)

    def get(self, name: str) -> Optional[Language]:
        for lang in self._languages:
            if lang.name == name:
                return lang
        return None

    def detect(self, path: str) -> Optional[Language]:
        """Return the language for *path*, or None if unsupported."""
        for lang in self._languages:
            if lang.matches(path):
                return lang
        return None

    # ---- config filtering ----

    def apply_config(self, config: ScryDiffConfig) -> None:
        """Drop languages listed in ``lsp.disable``."""
        disabled = set(config.lsp.disable)
        self._languages = [lang for lang in self._languages if lang.name not in disabled]

    # ---- custom server loading ----

    def load_custom_servers(self, directory: Path) -> int:
        """Load YAML server definitions from *directory*. Returns count loaded."""
        if not directory.is_dir():
            return 0
        loaded: List[Language] = []
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                loaded.extend(self._load_yaml_servers(path))
        # Custom servers take precedence over built-ins, in file order.
        for lang in reversed(loaded):
            self.register(lang, first=True)
        return len(loaded)

    def _load_yaml_servers(self, path: Path) -> List[Language]:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return []
        if not isinstance(data, list):
            data = [data]
        languages = []
        for entry in data:
            languages.append(
                Language(
                    name=entry["name"],
                    extensions=[_normalise_ext(str(e)) for e in _as_list(entry["extensions"])],
                    command=entry["command"],
                    args=[str(a) for a in _as_list(entry.get("args", []))],
                )
            )
        logger.debug("Loaded %d language server(s) from %s", len(languages), path)
        return languages


def _as_list(value: Any) -> List[Any]:
    """A bare scalar in YAML means a one-item list."""
    if isinstance(value, list):
        return value
    if isinstance(value, (str, int, float)):
        return [value]
    raise TypeError(f"expected a list or a string, got {type(value).__name__}")


def _normalise_ext(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith(".") else "." + ext


def default_registry() -> LanguageRegistry:
    """Registry holding only the built-in servers."""
    return LanguageRegistry(BUILTIN_LANGUAGES)


def detect_language(path: str) -> Optional[Language]:
    """Look *path* up in the built-in table."""
    return default_registry().detect(path)


def build_registry(config: ScryDiffConfig, repo_root: Path) -> LanguageRegistry:
    """Create a fully populated, config-filtered language registry."""
    registry = default_registry()
    registry.load_custom_servers(repo_root / ".scrydiff-servers")
    registry.apply_config(config)
    return registry
