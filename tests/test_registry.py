"""Tests for the language registry and custom server loading."""

import sys
from pathlib import Path

import pytest
import yaml

from scrydiff.config.schema import LSPConfig, ScryDiffConfig
from scrydiff.lsp.registry import (
    BUILTIN_LANGUAGES,
    Language,
    LanguageRegistry,
    build_registry,
    default_registry,
    detect_language,
)


class TestDetectLanguage:
    def test_builtin_lookups(self):
        assert detect_language("cmd/main.go").command == "gopls"
        py = detect_language("pkg/app.py")
        assert py.command == "pyright-langserver"
        assert py.args == ["--stdio"]
        assert detect_language("web/App.tsx").name == "typescript"
        assert detect_language("deploy.yml").name == "yaml"

    def test_case_insensitive(self):
        assert detect_language("MAIN.GO").name == "go"

    def test_unsupported(self):
        assert detect_language("Makefile") is None
        assert detect_language("notes.md") is None

    def test_first_match_wins(self):
        reg = LanguageRegistry([
            Language("first", [".x"], "a"),
            Language("second", [".x"], "b"),
        ])
        assert reg.detect("f.x").name == "first"

    def test_names_unique(self):
        names = [lang.name for lang in BUILTIN_LANGUAGES]
        assert len(names) == len(set(names))


class TestAvailability:
    def test_python_is_available(self):
        assert Language("py", [".py"], sys.executable).available() is True

    def test_missing_binary(self):
        assert Language("x", [".x"], "no-such-language-server-xyz").available() is False


class TestRegistry:
    def test_default_registry_is_a_copy(self):
        reg = default_registry()
        reg.register(Language("extra", [".extra"], "extra"))
        assert default_registry().get("extra") is None

    def test_apply_config_disables(self):
        reg = default_registry()
        reg.apply_config(ScryDiffConfig(lsp=LSPConfig(disable=["go", "json"])))
        assert reg.detect("main.go") is None
        assert reg.detect("package.json") is None
        assert reg.detect("app.rs") is not None


class TestCustomServers:
    def test_load_yaml(self, tmp_path: Path):
        servers = tmp_path / ".scrydiff-servers"
        servers.mkdir()
        (servers / "zig.yaml").write_text(yaml.safe_dump({
            "name": "zig", "extensions": ["zig"], "command": "zls",
        }))
        (servers / "go.yml").write_text(yaml.safe_dump([
            {"name": "go-custom", "extensions": [".GO"], "command": "my-gopls", "args": ["-rpc.trace"]},
        ]))
        (servers / "notes.txt").write_text("ignored")

        reg = default_registry()
        assert reg.load_custom_servers(servers) == 2
        zig = reg.detect("build.zig")
        assert zig.command == "zls"
        assert zig.args == []
        go = reg.detect("main.go")
        assert go.name == "go-custom"
        assert go.args == ["-rpc.trace"]

    def test_scalar_extensions_and_args(self, tmp_path: Path):
        servers = tmp_path / ".scrydiff-servers"
        servers.mkdir()
        (servers / "zig.yaml").write_text("name: zig\nextensions: zig\ncommand: zls\nargs: --stdio\n")
        reg = LanguageRegistry([])
        reg.load_custom_servers(servers)
        zig = reg.get("zig")
        assert zig.extensions == [".zig"]
        assert zig.args == ["--stdio"]
        assert reg.detect("main.z") is None

    def test_mapping_extensions_rejected(self, tmp_path: Path):
        servers = tmp_path / ".scrydiff-servers"
        servers.mkdir()
        (servers / "bad.yaml").write_text("name: bad\nextensions: {zig: 1}\ncommand: zls\n")
        with pytest.raises(TypeError):
            LanguageRegistry([]).load_custom_servers(servers)

    def test_missing_directory(self, tmp_path: Path):
        assert default_registry().load_custom_servers(tmp_path / "nope") == 0

    def test_build_registry(self, tmp_path: Path):
        servers = tmp_path / ".scrydiff-servers"
        servers.mkdir()
        (servers / "lua.yaml").write_text(yaml.safe_dump({
            "name": "lua-custom", "extensions": [".lua"], "command": "emmylua",
        }))
        cfg = ScryDiffConfig(lsp=LSPConfig(disable=["rust", "lua-custom"]))
        reg = build_registry(cfg, tmp_path)
        assert reg.detect("app.rs") is None
        assert reg.detect("init.lua").name == "lua"
