"""Exceptions raised by the srs core.

Transports (CLI, HTTP daemon, MCP server) translate these into their own
error surfaces; the core never swallows them.
"""


class SrsError(Exception):
    """Base class for all srs errors."""


class FileIOError(SrsError):
    """A card file is missing, unreadable, undecodable or unwritable.

    `missing` is set when the path does not exist at all.
    """

    def __init__(self, path, reason: str, missing: bool = False):
        self.path = path
        self.reason = reason
        self.missing = missing
        super().__init__(f"{path}: {reason}")


class ValidationError(SrsError):
    """An argument was rejected before any state was touched (bad rating, missing path)."""


class EndOfSessionError(SrsError):
    """The review session has no current card."""


class DeckPathError(SrsError):
    """A deck path could not be resolved against the configuration."""
