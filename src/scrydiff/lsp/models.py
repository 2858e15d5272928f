"""LSP data models — positions, edits, code actions, document symbols.

Only the slice of the protocol the client actually exchanges is modelled.
Wire dicts are converted with ``from_dict`` helpers; malformed payloads
raise ``ValueError`` / ``KeyError`` / ``TypeError`` for the caller to map.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class SymbolKind(str, Enum):
    """LSP symbol kinds (codes 1..26) plus a catch-all for unknown codes."""

    FILE = "File"
    MODULE = "Module"
    NAMESPACE = "Namespace"
    PACKAGE = "Package"
    CLASS = "Class"
    METHOD = "Method"
    PROPERTY = "Property"
    FIELD = "Field"
    CONSTRUCTOR = "Constructor"
    ENUM = "Enum"
    INTERFACE = "Interface"
    FUNCTION = "Function"
    VARIABLE = "Variable"
    CONSTANT = "Constant"
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    ARRAY = "Array"
    OBJECT = "Object"
    KEY = "Key"
    NULL = "Null"
    ENUM_MEMBER = "EnumMember"
    STRUCT = "Struct"
    EVENT = "Event"
    OPERATOR = "Operator"
    TYPE_PARAMETER = "TypeParameter"
    UNKNOWN = "Unknown"

    @classmethod
    def from_code(cls, code: Any) -> "SymbolKind":
        """Map a numeric LSP kind to a member; unknown codes give UNKNOWN."""
        return _KIND_BY_CODE.get(code, cls.UNKNOWN)


# Declaration order of the enum matches the protocol's numbering.
_KIND_BY_CODE: Dict[int, SymbolKind] = {
    code: kind
    for code, kind in enumerate(
        (k for k in SymbolKind if k is not SymbolKind.UNKNOWN), start=1
    )
}


@dataclass(frozen=True)
class Position:
    line: int
    character: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        return cls(line=int(data["line"]), character=int(data["character"]))

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Range":
        return cls(
            start=Position.from_dict(data["start"]),
            end=Position.from_dict(data["end"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class TextEdit:
    range: Range
    new_text: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextEdit":
        return cls(range=Range.from_dict(data["range"]), new_text=str(data["newText"]))


def parse_text_edits(data: Any) -> List[TextEdit]:
    """Parse a ``TextEdit[] | null`` result."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise TypeError(f"expected a list of text edits, got {type(data).__name__}")
    return [TextEdit.from_dict(item) for item in data]


@dataclass
class WorkspaceEdit:
    changes: Dict[str, List[TextEdit]] = field(default_factory=dict)
    document_changes: List[List[TextEdit]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceEdit":
        raw_changes = data.get("changes") or {}
        raw_documents = data.get("documentChanges") or []
        if not isinstance(raw_changes, dict):
            raise TypeError("changes must be an object")
        if not isinstance(raw_documents, list):
            raise TypeError("documentChanges must be a list")
        changes = {uri: parse_text_edits(edits) for uri, edits in raw_changes.items()}
        document_changes = [
            parse_text_edits(doc.get("edits"))
            for doc in raw_documents
            if isinstance(doc, dict) and "edits" in doc
        ]
        return cls(changes=changes, document_changes=document_changes)

    def first_edits(self) -> Optional[List[TextEdit]]:
        """Edits for the first document touched, ``changes`` before ``documentChanges``."""
        for edits in self.changes.values():
            return edits
        for edits in self.document_changes:
            return edits
        return None


@dataclass
class CodeAction:
    title: str
    kind: str = ""
    edit: Optional[WorkspaceEdit] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeAction":
        edit = data.get("edit")
        return cls(
            title=str(data.get("title", "")),
            kind=str(data.get("kind", "")),
            edit=WorkspaceEdit.from_dict(edit) if isinstance(edit, dict) else None,
        )


@dataclass(frozen=True)
class DocumentSymbol:
    """A flattened symbol outline entry. Lines are 0-based."""

    name: str
    kind: SymbolKind
    line: int
    end_line: int


# --- documentSymbol response shapes ---


@dataclass(frozen=True)
class HierarchicalSymbols:
    """``DocumentSymbol[]`` — nested outline, already flattened."""

    symbols: List[DocumentSymbol]


@dataclass(frozen=True)
class FlatSymbols:
    """Legacy ``SymbolInformation[]``."""

    symbols: List[DocumentSymbol]


@dataclass(frozen=True)
class Unparseable:
    reason: str


SymbolResponse = Union[HierarchicalSymbols, FlatSymbols, Unparseable]


def _flatten_hierarchical(items: List[Dict[str, Any]], out: List[DocumentSymbol]) -> None:
    for item in items:
        rng = Range.from_dict(item["range"])
        out.append(
            DocumentSymbol(
                name=str(item["name"]),
                kind=SymbolKind.from_code(item.get("kind")),
                line=rng.start.line,
                end_line=rng.end.line,
            )
        )
        children = item.get("children") or []
        if not isinstance(children, list):
            raise TypeError("children must be a list")
        _flatten_hierarchical(children, out)


def _try_hierarchical(result: List[Any]) -> Optional[HierarchicalSymbols]:
    if not all(isinstance(item, dict) and "range" in item for item in result):
        return None
    out: List[DocumentSymbol] = []
    try:
        _flatten_hierarchical(result, out)
    except (KeyError, TypeError, ValueError):
        return None
    return HierarchicalSymbols(out)


def _try_flat(result: List[Any]) -> Optional[FlatSymbols]:
    out: List[DocumentSymbol] = []
    try:
        for item in result:
            rng = Range.from_dict(item["location"]["range"])
            out.append(
                DocumentSymbol(
                    name=str(item["name"]),
                    kind=SymbolKind.from_code(item.get("kind")),
                    line=rng.start.line,
                    end_line=rng.end.line,
                )
            )
    except (KeyError, TypeError, ValueError):
        return None
    return FlatSymbols(out)


def classify_symbol_response(result: Any) -> SymbolResponse:
    """Decide which shape a documentSymbol result has.

    Hierarchical is tried first, then flat. ``null`` and ``[]`` are an
    empty flat outline.
    """
    if result is None:
        return FlatSymbols([])
    if not isinstance(result, list):
        return Unparseable(f"expected a list, got {type(result).__name__}")
    if result:
        hierarchical = _try_hierarchical(result)
        if hierarchical is not None:
            return hierarchical
    flat = _try_flat(result)
    if flat is not None:
        return flat
    return Unparseable("result is neither DocumentSymbol[] nor SymbolInformation[]")
