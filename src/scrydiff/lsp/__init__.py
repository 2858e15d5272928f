"""Language-server support — registry, JSON-RPC client, protocol models."""

from scrydiff.lsp.client import (
    Deadline,
    LSPClient,
    LSPError,
    LSPProtocolError,
    LSPResponseError,
    LSPTimeoutError,
)
from scrydiff.lsp.models import DocumentSymbol, Position, Range, SymbolKind, TextEdit
from scrydiff.lsp.registry import (
    BUILTIN_LANGUAGES,
    Language,
    LanguageRegistry,
    build_registry,
    default_registry,
    detect_language,
)

__all__ = [
    "BUILTIN_LANGUAGES",
    "Deadline",
    "DocumentSymbol",
    "LSPClient",
    "LSPError",
    "LSPProtocolError",
    "LSPResponseError",
    "LSPTimeoutError",
    "Language",
    "LanguageRegistry",
    "Position",
    "Range",
    "SymbolKind",
    "TextEdit",
    "build_registry",
    "default_registry",
    "detect_language",
]
