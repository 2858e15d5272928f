"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Literal, Optional

if TYPE_CHECKING:
    from scrydiff.lsp.registry import LanguageRegistry
    from scrydiff.prioritizer.models import Options

OutputFormat = Literal["text", "json", "stats"]

OUTPUT_FORMATS = ("text", "json", "stats")


@dataclass
class PrioritizeConfig:
    max_high_priority_lines: int = 400
    include_summary: bool = True


@dataclass
class LSPConfig:
    enabled: bool = True
    timeout: float = 5.0  # seconds, shared by every lookup in one run
    disable: List[str] = field(default_factory=list)  # language names


@dataclass
class OutputConfig:
    format: OutputFormat = "text"


@dataclass
class ScryDiffConfig:
    version: str = "1.0"
    prioritize: PrioritizeConfig = field(default_factory=PrioritizeConfig)
    lsp: LSPConfig = field(default_factory=LSPConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_options(
        self,
        work_dir: Optional[Path] = None,
        registry: Optional["LanguageRegistry"] = None,
    ) -> "Options":
        """Build engine options from this config."""
        from scrydiff.prioritizer.models import Options

        return Options(
            max_high_priority_lines=self.prioritize.max_high_priority_lines,
            include_summary=self.prioritize.include_summary,
            lsp_timeout=self.lsp.timeout,
            work_dir=work_dir,
            enable_lsp=self.lsp.enabled,
            registry=registry,
        )
