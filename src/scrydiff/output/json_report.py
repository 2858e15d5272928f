"""JSON reporter for scripts and CI pipelines."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict

from scrydiff.prioritizer.engine import format_for_prompt
from scrydiff.prioritizer.models import PrioritizedDiff


def to_dict(result: PrioritizedDiff) -> Dict[str, Any]:
    """Convert a PrioritizedDiff to a JSON-serialisable dict."""
    return {
        "version": "1.0",
        "high_priority": result.high_priority,
        "summary": result.summary,
        "stats": dataclasses.asdict(result.stats),
        "prompt": format_for_prompt(result),
    }


def render(result: PrioritizedDiff) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)
