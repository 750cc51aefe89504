"""auroractl: summarize pending Aurora job diffs across config files."""

__version__ = "0.1.0"
