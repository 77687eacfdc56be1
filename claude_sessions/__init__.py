"""Browse, export and clean up Claude Code sessions from the terminal."""

__version__ = "0.2.0"
