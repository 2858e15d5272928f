"""Hunk scoring — file category times the weight of the symbols touched.

``score = (symbol_weight + size_bonus) * category_multiplier`` where
``symbol_weight`` is the best weight among the symbols whose range overlaps
the hunk (``WEIGHT_DEFAULT`` when none do) and ``size_bonus`` grows with the
number of changed lines up to ``MAX_SIZE_BONUS``.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List, Sequence

from scrydiff.git.models import FileDiff, Hunk, count_hunk_lines
from scrydiff.lsp.models import DocumentSymbol, SymbolKind
from scrydiff.prioritizer.models import FileCategory

WEIGHT_FUNCTION = 100.0
WEIGHT_CLASS = 90.0
WEIGHT_CONSTRUCTOR = 85.0
WEIGHT_ENUM = 80.0
WEIGHT_PROPERTY = 50.0
WEIGHT_VARIABLE = 40.0
WEIGHT_MODULE = 30.0
WEIGHT_DEFAULT = 20.0

BONUS_EXPORTED = 50.0  # public-looking symbol names
MAX_SIZE_BONUS = 50.0
SIZE_BONUS_PER_LINE = 0.1

# Every SymbolKind is listed; a new kind has to be placed here explicitly.
SYMBOL_KIND_WEIGHTS: Dict[SymbolKind, float] = {
    SymbolKind.FUNCTION: WEIGHT_FUNCTION,
    SymbolKind.METHOD: WEIGHT_FUNCTION,
    SymbolKind.CLASS: WEIGHT_CLASS,
    SymbolKind.STRUCT: WEIGHT_CLASS,
    SymbolKind.INTERFACE: WEIGHT_CLASS,
    SymbolKind.CONSTRUCTOR: WEIGHT_CONSTRUCTOR,
    SymbolKind.ENUM: WEIGHT_ENUM,
    SymbolKind.PROPERTY: WEIGHT_PROPERTY,
    SymbolKind.FIELD: WEIGHT_PROPERTY,
    SymbolKind.VARIABLE: WEIGHT_VARIABLE,
    SymbolKind.CONSTANT: WEIGHT_VARIABLE,
    SymbolKind.MODULE: WEIGHT_MODULE,
    SymbolKind.PACKAGE: WEIGHT_MODULE,
    SymbolKind.FILE: WEIGHT_DEFAULT,
    SymbolKind.NAMESPACE: WEIGHT_DEFAULT,
    SymbolKind.STRING: WEIGHT_DEFAULT,
    SymbolKind.NUMBER: WEIGHT_DEFAULT,
    SymbolKind.BOOLEAN: WEIGHT_DEFAULT,
    SymbolKind.ARRAY: WEIGHT_DEFAULT,
    SymbolKind.OBJECT: WEIGHT_DEFAULT,
    SymbolKind.KEY: WEIGHT_DEFAULT,
    SymbolKind.NULL: WEIGHT_DEFAULT,
    SymbolKind.ENUM_MEMBER: WEIGHT_DEFAULT,
    SymbolKind.EVENT: WEIGHT_DEFAULT,
    SymbolKind.OPERATOR: WEIGHT_DEFAULT,
    SymbolKind.TYPE_PARAMETER: WEIGHT_DEFAULT,
    SymbolKind.UNKNOWN: WEIGHT_DEFAULT,
}

_GENERATED_DIRS = ("vendor", "node_modules")
_GENERATED_SUFFIXES = ("_gen.go", ".gen.go", ".generated.go", ".pb.go")
_TEST_SUFFIXES = ("_test.go", ".test.ts", ".test.js", ".spec.ts", ".spec.js")
_TEST_DIRS = ("test", "tests", "__tests__")
_DOC_EXTS = {".md", ".txt", ".rst"}
_DOC_NAMES = {"README", "CHANGELOG", "LICENSE"}
_CONFIG_EXTS = {".json", ".yaml", ".yml", ".toml", ".xml", ".ini"}
_SOURCE_EXTS = {
    ".go", ".py", ".rs", ".ts", ".tsx", ".js", ".jsx", ".cs", ".java", ".rb",
    ".php", ".swift", ".kt", ".scala", ".c", ".cpp", ".h", ".hpp",
    ".lua", ".nix", ".zig", ".odin",
}


def categorize_file(path: str) -> FileCategory:
    """Classify *path*. Checked in order: generated, test, doc, config, source."""
    p = PurePosixPath(path)
    base = p.name
    ext = p.suffix
    dirs = p.parts[:-1]

    if any(d in _GENERATED_DIRS for d in dirs) or base.endswith(_GENERATED_SUFFIXES):
        return FileCategory.GENERATED

    if (
        base.endswith(_TEST_SUFFIXES)
        or base.startswith("test_")
        or any(d in _TEST_DIRS for d in dirs)
    ):
        return FileCategory.TEST

    if ext in _DOC_EXTS or base in _DOC_NAMES:
        return FileCategory.DOC

    if ext in _CONFIG_EXTS or base.startswith("."):
        return FileCategory.CONFIG

    if ext in _SOURCE_EXTS:
        return FileCategory.SOURCE

    return FileCategory.UNKNOWN


def symbol_kind_weight(kind: SymbolKind) -> float:
    return SYMBOL_KIND_WEIGHTS[kind]


def is_exported(name: str) -> bool:
    """Public-looking name: the first character is uppercase, in any language."""
    return bool(name) and name[0].isupper()


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Inclusive range intersection; touching ranges overlap."""
    return start1 <= end2 and end1 >= start2


def score_hunk(hunk: Hunk, symbols: Sequence[DocumentSymbol] = ()) -> float:
    """Score *hunk*, record the symbols it touches, and return the score."""
    multiplier = categorize_file(hunk.file_path).multiplier
    size_bonus = min(count_hunk_lines(hunk) * SIZE_BONUS_PER_LINE, MAX_SIZE_BONUS)

    best = 0.0
    touched: List[str] = []
    for sym in symbols:
        if not overlaps(hunk.new_start, hunk.new_end, sym.line, sym.end_line):
            continue
        weight = symbol_kind_weight(sym.kind)
        if is_exported(sym.name):
            weight += BONUS_EXPORTED
        best = max(best, weight)
        touched.append(sym.name)

    if best == 0:
        best = WEIGHT_DEFAULT

    hunk.symbols = touched
    hunk.score = (best + size_bonus) * multiplier
    return hunk.score


def score_file_diff(file_diff: FileDiff, symbols: Sequence[DocumentSymbol] = ()) -> None:
    for hunk in file_diff.hunks:
        score_hunk(hunk, symbols)
