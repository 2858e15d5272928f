"""scrydiff — fit large diffs into a small prompt, most important hunks first."""

__version__ = "0.1.0"
