"""Parse unified diffs, read CI build information and write review comments."""

__version__ = "0.1.0"

__all__ = ["cienv", "comment", "diff", "diffservice", "options", "version"]