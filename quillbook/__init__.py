"""Parse SUMMARY.md outlines and load Markdown books into a chapter tree."""

__version__ = "0.1.0"