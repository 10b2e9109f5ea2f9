"""scrollback: page, search, and track read-state over a remote message log."""

__version__ = "0.1.0"
