"""
fsmeta — structured metadata for files and directories.

fsmeta attaches tags, comments and named collections to files without
touching the files themselves. Metadata lives in a ``.fsm`` directory at a
root found by ancestor search, much like a version-control checkout, and all
paths are stored relative to that root.

Package layout (src/fsmeta/):
  core/         — constants, exceptions, config, logging
  core/values   — typed tag values and the value parser
  core/paths    — root-relative path normalization
  core/root     — root discovery and initialization
  core/store/   — repository model, codecs, persistence
  cli/          — Click CLI entry point
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
