"""Tests for the JSON-RPC client, driven against a scripted fake server."""

import io
import json
import time
from pathlib import Path

import pytest

from scrydiff.lsp.client import (
    Deadline,
    LSPClient,
    LSPError,
    LSPProtocolError,
    LSPResponseError,
    LSPTimeoutError,
)
from scrydiff.lsp.models import SymbolKind
from scrydiff.lsp.registry import Language

from conftest import fake_language

URI = "file:///tmp/project/main.go"


def _log_messages(log: Path):
    return [json.loads(line) for line in log.read_text().splitlines()]


@pytest.fixture
def client_for(tmp_path):
    clients = []

    def _make(mode: str = "hierarchical", log: Path | None = None) -> LSPClient:
        client = LSPClient(fake_language(mode, log=log))
        clients.append(client)
        client.initialize(tmp_path)
        return client

    yield _make
    for c in clients:
        c.close()


class TestLifecycle:
    def test_missing_binary(self):
        lang = Language("ghost", [".ghost"], "definitely-not-a-real-lsp-binary")
        with pytest.raises(LSPError):
            LSPClient(lang)

    def test_initialize_handshake(self, tmp_path):
        log = tmp_path / "log.jsonl"
        with LSPClient(fake_language(log=log)) as client:
            client.initialize(tmp_path)
        messages = _log_messages(log)
        init = messages[0]
        assert init["method"] == "initialize"
        assert init["id"] == 1
        assert init["params"]["rootUri"] == tmp_path.resolve().as_uri()
        caps = init["params"]["capabilities"]["textDocument"]
        assert "formatting" in caps
        value_set = caps["codeAction"]["codeActionLiteralSupport"]["codeActionKind"]["valueSet"]
        assert value_set == ["source.organizeImports"]
        assert messages[1] == {"jsonrpc": "2.0", "method": "initialized", "params": {}}

    def test_close_sends_shutdown_and_exit(self, tmp_path):
        log = tmp_path / "log.jsonl"
        client = LSPClient(fake_language(log=log))
        client.initialize(tmp_path)
        assert client.close() == 0
        methods = [m["method"] for m in _log_messages(log)]
        assert methods[-2:] == ["shutdown", "exit"]
        assert all("id" not in m for m in _log_messages(log)[-2:])

    def test_close_twice(self, tmp_path):
        client = LSPClient(fake_language())
        client.close()
        client.close()

    def test_server_dies_during_initialize(self, tmp_path):
        with LSPClient(fake_language("die")) as client:
            with pytest.raises(LSPError):
                client.initialize(tmp_path)

    def test_request_ids_increase(self, client_for, tmp_path):
        log = tmp_path / "ids.jsonl"
        client = client_for(log=log)
        client.document_symbols(URI)
        client.format(URI)
        ids = [m["id"] for m in _log_messages(log) if "id" in m]
        assert ids == [1, 2, 3]


class TestDocuments:
    def test_open_and_close_notifications(self, client_for, tmp_path):
        log = tmp_path / "docs.jsonl"
        client = client_for(log=log)
        client.open_document(URI, "go", "package main\n")
        client.close_document(URI)
        client.document_symbols(URI)  # round trip so the server has logged both
        messages = _log_messages(log)
        did_open = next(m for m in messages if m["method"] == "textDocument/didOpen")
        assert "id" not in did_open
        assert did_open["params"]["textDocument"] == {
            "uri": URI,
            "languageId": "go",
            "version": 1,
            "text": "package main\n",
        }
        did_close = next(m for m in messages if m["method"] == "textDocument/didClose")
        assert did_close["params"] == {"textDocument": {"uri": URI}}


class TestDocumentSymbols:
    def test_hierarchical_flattened_in_order(self, client_for):
        symbols = client_for("hierarchical").document_symbols(URI)
        assert [s.name for s in symbols] == ["Server", "Handle", "port", "helper"]
        server, handle, port, helper = symbols
        assert server.kind is SymbolKind.CLASS
        assert (server.line, server.end_line) == (2, 30)
        assert handle.kind is SymbolKind.METHOD
        assert (handle.line, handle.end_line) == (5, 12)
        assert port.kind is SymbolKind.FIELD
        assert helper.kind is SymbolKind.UNKNOWN

    def test_flat(self, client_for):
        symbols = client_for("flat").document_symbols(URI)
        assert [(s.name, s.kind, s.line, s.end_line) for s in symbols] == [
            ("main", SymbolKind.FUNCTION, 3, 9),
            ("Version", SymbolKind.CONSTANT, 0, 0),
        ]

    def test_null_result(self, client_for):
        assert client_for("empty").document_symbols(URI) == []

    def test_unparseable(self, client_for):
        with pytest.raises(LSPProtocolError):
            client_for("garbage").document_symbols(URI)

    def test_error_object(self, client_for):
        with pytest.raises(LSPResponseError) as excinfo:
            client_for("error").document_symbols(URI)
        assert excinfo.value.code == -32603
        assert "boom" in str(excinfo.value)

    def test_missing_content_length(self, client_for):
        with pytest.raises(LSPProtocolError, match="Content-Length"):
            client_for("noheader").document_symbols(URI)


class TestEdits:
    def test_format(self, client_for, tmp_path):
        log = tmp_path / "fmt.jsonl"
        edits = client_for(log=log).format(URI)
        assert len(edits) == 1
        assert edits[0].new_text == "import os\n"
        assert edits[0].range.end.line == 1
        request = next(m for m in _log_messages(log) if m["method"] == "textDocument/formatting")
        assert request["params"]["options"] == {"tabSize": 4, "insertSpaces": False}

    def test_organize_imports(self, client_for, tmp_path):
        log = tmp_path / "oi.jsonl"
        content = "package main\n\nimport \"os\"\nfunc main() {}"
        edits = client_for(log=log).organize_imports(URI, content)
        assert edits is not None
        assert edits[0].new_text == "import os\n"
        request = next(m for m in _log_messages(log) if m["method"] == "textDocument/codeAction")
        assert request["params"]["range"]["end"] == {"line": 3, "character": 14}
        assert request["params"]["context"]["only"] == ["source.organizeImports"]

    def test_organize_imports_no_action(self, client_for):
        assert client_for("noactions").organize_imports(URI, "x") is None

    def test_organize_imports_malformed_edit(self, client_for):
        assert client_for("badedit").organize_imports(URI, "x") is None

    def test_organize_imports_transport_failure(self, tmp_path):
        client = LSPClient(fake_language())
        client.initialize(tmp_path)
        client.close()
        assert client.organize_imports(URI, "x") is None


class TestDeadline:
    def test_unbounded(self):
        d = Deadline(None)
        assert d.expired() is False
        assert d.remaining is None
        d.check("anything")

    def test_expired(self):
        d = Deadline(0.0)
        time.sleep(0.001)
        assert d.expired() is True
        with pytest.raises(LSPTimeoutError):
            d.check("initialize")

    def test_expired_deadline_blocks_request(self, tmp_path):
        with LSPClient(fake_language()) as client:
            with pytest.raises(LSPTimeoutError):
                client.initialize(tmp_path, deadline=Deadline(0.0))


class TestFraming:
    """Frame handling against in-memory streams, no subprocess."""

    def _client(self, incoming: bytes) -> LSPClient:
        client = LSPClient.__new__(LSPClient)
        client.language = Language("mem", [".x"], "mem")
        client._stdout = io.BytesIO(incoming)
        client._stdin = io.BytesIO()
        return client

    def test_send_frames_json(self):
        client = self._client(b"")
        client._send({"jsonrpc": "2.0", "method": "exit"})
        raw = client._stdin.getvalue()
        header, body = raw.split(b"\r\n\r\n", 1)
        assert header == f"Content-Length: {len(body)}".encode()
        assert json.loads(body) == {"jsonrpc": "2.0", "method": "exit"}

    def test_receive_multibyte_body(self):
        body = json.dumps({"jsonrpc": "2.0", "id": 1, "result": "héllo"}, ensure_ascii=False).encode()
        client = self._client(b"Content-Length: %d\r\nContent-Type: x\r\n\r\n" % len(body) + body)
        assert client._receive()["result"] == "héllo"

    def test_zero_length(self):
        client = self._client(b"Content-Length: 0\r\n\r\n")
        with pytest.raises(LSPProtocolError):
            client._receive()

    def test_invalid_json(self):
        client = self._client(b"Content-Length: 3\r\n\r\n{x}")
        with pytest.raises(LSPProtocolError):
            client._receive()

    def test_truncated_body(self):
        client = self._client(b"Content-Length: 50\r\n\r\n{}")
        with pytest.raises(LSPError):
            client._receive()

    def test_eof(self):
        client = self._client(b"")
        with pytest.raises(LSPError):
            client._receive()
