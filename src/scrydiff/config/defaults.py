"""Starter .scrydiff.toml template."""

DEFAULT_TOML = """\
# scrydiff configuration
version = "1.0"

[prioritize]
max_high_priority_lines = 400   # changed-line budget for the full-text part
include_summary = true          # list what was left out

[lsp]
enabled = true
timeout = 5.0                   # seconds for all symbol lookups in one run
# disable = ["typescript", "json"]

[output]
format = "text"                 # text | json | stats
"""
