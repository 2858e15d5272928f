"""Minimal Language Server Protocol client over JSON-RPC stdio.

One client drives one spawned server for one short-lived query::

    with LSPClient(language) as client:
        client.initialize(root, deadline=Deadline(5.0))
        client.open_document(uri, language.name, text)
        symbols = client.document_symbols(uri)
        client.close_document(uri)

Every message is framed as ``Content-Length: <n>\\r\\n\\r\\n`` followed by
exactly *n* bytes of JSON. Requests are answered strictly one at a time:
the client keeps reading frames, discarding notifications and unrelated
messages, until the response carrying its request id arrives.
"""

from __future__ import annotations

import contextlib
import itertools
import json
import logging
import os
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, Any, Dict, List, Optional

from scrydiff.lsp.models import (
    CodeAction,
    DocumentSymbol,
    FlatSymbols,
    HierarchicalSymbols,
    TextEdit,
    Unparseable,
    classify_symbol_response,
    parse_text_edits,
)
from scrydiff.lsp.registry import Language

logger = logging.getLogger(__name__)

ORGANIZE_IMPORTS = "source.organizeImports"

_EXIT_WAIT_SECONDS = 2.0


class LSPError(Exception):
    """Raised when talking to a language server fails."""


class LSPProtocolError(LSPError):
    """Raised on malformed frames or payloads."""


class LSPResponseError(LSPError):
    """Raised when the server answers with a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"LSP error {code}: {message}")
        self.code = code
        self.message = message


class LSPTimeoutError(LSPError):
    """Raised when a deadline has passed at a checkpoint."""


class Deadline:
    """A point in monotonic time after which work should stop.

    Checked between frames, never during a blocking read, so a silent
    server can overrun it until its next message arrives.
    """

    def __init__(self, seconds: Optional[float]) -> None:
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    @property
    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, what: str) -> None:
        if self.expired():
            raise LSPTimeoutError(f"deadline exceeded during {what}")


class LSPClient:
    """Synchronous client for one language-server subprocess."""

    def __init__(self, language: Language) -> None:
        self.language = language
        try:
            self._proc = subprocess.Popen(
                [language.command, *language.args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise LSPError(f"failed to start {language.command}: {exc}") from exc

        assert self._proc.stdin is not None and self._proc.stdout is not None
        self._stdin: IO[bytes] = self._proc.stdin
        self._stdout: IO[bytes] = self._proc.stdout
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "LSPClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ---- lifecycle ----

    def initialize(self, root_path: str | Path, *, deadline: Optional[Deadline] = None) -> None:
        """Run the ``initialize`` / ``initialized`` handshake."""
        params = {
            "processId": os.getpid(),
            "rootUri": Path(root_path).resolve().as_uri(),
            "capabilities": {
                "textDocument": {
                    "formatting": {"dynamicRegistration": False},
                    "codeAction": {
                        "dynamicRegistration": False,
                        "codeActionLiteralSupport": {
                            "codeActionKind": {"valueSet": [ORGANIZE_IMPORTS]},
                        },
                    },
                },
            },
        }
        self._call("initialize", params, deadline)
        self._notify("initialized", {})

    def close(self) -> Optional[int]:
        """Shut the server down. Best-effort; safe to call twice."""
        if self._closed:
            return self._proc.returncode
        self._closed = True

        for method in ("shutdown", "exit"):
            with contextlib.suppress(LSPError):
                self._notify(method)
        with contextlib.suppress(OSError):
            self._stdin.close()

        try:
            self._proc.wait(timeout=_EXIT_WAIT_SECONDS)
        except subprocess.TimeoutExpired:
            logger.debug("%s did not exit, killing it", self.language.command)
            self._proc.kill()
            self._proc.wait()
        self._stdout.close()
        return self._proc.returncode

    # ---- documents ----

    def open_document(self, uri: str, language_id: str, text: str) -> None:
        self._notify(
            "textDocument/didOpen",
            {
                "textDocument": {
                    "uri": uri,
                    "languageId": language_id,
                    "version": 1,
                    "text": text,
                },
            },
        )

    def close_document(self, uri: str) -> None:
        self._notify("textDocument/didClose", {"textDocument": {"uri": uri}})

    # ---- requests ----

    def format(self, uri: str, *, deadline: Optional[Deadline] = None) -> List[TextEdit]:
        """Whole-document formatting edits."""
        params = {
            "textDocument": {"uri": uri},
            "options": {"tabSize": 4, "insertSpaces": False},
        }
        result = self._call("textDocument/formatting", params, deadline)
        try:
            return parse_text_edits(result)
        except (KeyError, TypeError, ValueError) as exc:
            raise LSPProtocolError(f"failed to parse formatting result: {exc}") from exc

    def organize_imports(
        self, uri: str, content: str, *, deadline: Optional[Deadline] = None
    ) -> Optional[List[TextEdit]]:
        """Edits from the server's organize-imports action.

        Returns None when the server offers no such action, and also when
        the request itself fails.
        """
        lines = content.split("\n")
        end_line = len(lines) - 1
        params = {
            "textDocument": {"uri": uri},
            "range": {
                "start": {"line": 0, "character": 0},
                "end": {"line": end_line, "character": len(lines[end_line])},
            },
            "context": {"diagnostics": [], "only": [ORGANIZE_IMPORTS]},
        }
        try:
            result = self._call("textDocument/codeAction", params, deadline)
        except LSPError as exc:
            logger.debug("codeAction failed for %s: %s", uri, exc)
            return None
        if not isinstance(result, list):
            return None

        for item in result:
            if not isinstance(item, dict):
                continue
            try:
                action = CodeAction.from_dict(item)
            except (KeyError, TypeError, ValueError):
                continue
            if action.kind != ORGANIZE_IMPORTS or action.edit is None:
                continue
            edits = action.edit.first_edits()
            if edits is not None:
                return edits
        return None

    def document_symbols(
        self, uri: str, *, deadline: Optional[Deadline] = None
    ) -> List[DocumentSymbol]:
        """Flattened symbol outline of *uri*."""
        result = self._call(
            "textDocument/documentSymbol", {"textDocument": {"uri": uri}}, deadline
        )
        response = classify_symbol_response(result)
        if isinstance(response, (HierarchicalSymbols, FlatSymbols)):
            return response.symbols
        assert isinstance(response, Unparseable)
        raise LSPProtocolError(f"failed to parse document symbols: {response.reason}")

    # ---- JSON-RPC plumbing ----

    def _call(self, method: str, params: Any, deadline: Optional[Deadline] = None) -> Any:
        deadline = deadline or Deadline(None)
        with self._lock:
            deadline.check(method)
            request_id = next(self._ids)
            self._send({"jsonrpc": "2.0", "id": request_id, "method": method, "params": params})

            while True:
                message = self._receive()
                if message.get("id") == request_id and "method" not in message:
                    break
                logger.debug(
                    "Discarding %s while waiting for %s #%d",
                    message.get("method", f"response #{message.get('id')}"),
                    method,
                    request_id,
                )
                deadline.check(method)

        error = message.get("error")
        if error is not None:
            if not isinstance(error, dict):
                raise LSPResponseError(0, str(error))
            code = error.get("code")
            raise LSPResponseError(
                code if isinstance(code, int) else 0, str(error.get("message", ""))
            )
        return message.get("result")

    def _notify(self, method: str, params: Any = None) -> None:
        message: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            message["params"] = params
        with self._lock:
            self._send(message)

    def _send(self, message: Dict[str, Any]) -> None:
        body = json.dumps(message).encode("utf-8")
        header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
        try:
            self._stdin.write(header + body)
            self._stdin.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            raise LSPError(f"failed to write to {self.language.command}: {exc}") from exc

    def _receive(self) -> Dict[str, Any]:
        content_length = 0
        while True:
            raw = self._stdout.readline()
            if not raw:
                raise LSPError(f"{self.language.command} exited")
            line = raw.decode("ascii", errors="replace").strip()
            if not line:
                break
            name, _, value = line.partition(":")
            if name.strip().lower() == "content-length":
                try:
                    content_length = int(value.strip())
                except ValueError:
                    content_length = 0

        if content_length <= 0:
            raise LSPProtocolError("missing Content-Length header")

        body = self._stdout.read(content_length)
        if len(body) < content_length:
            raise LSPError(f"{self.language.command} exited mid-message")

        try:
            message = json.loads(body)
        except ValueError as exc:
            raise LSPProtocolError(f"invalid JSON frame: {exc}") from exc
        if not isinstance(message, dict):
            raise LSPProtocolError("JSON-RPC message is not an object")
        return message
