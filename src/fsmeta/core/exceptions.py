"""fsmeta exception hierarchy."""

from __future__ import annotations

from fsmeta.core.constants import ExitCode


class FsmetaError(Exception):
    """Base exception for all fsmeta errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(FsmetaError):
    """Raised when the configuration is invalid or cannot be read."""

    exit_code = ExitCode.CONFIG_ERROR


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


# ---------------------------------------------------------------------------
# Root discovery
# ---------------------------------------------------------------------------


class RootNotFound(FsmetaError):
    """Raised when no ``.fsm`` directory exists at or above the start directory."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, start: object) -> None:
        super().__init__(
            f"No fsmeta repository found at or above {start}. Run 'fsm db init' first."
        )
        self.start = start


class AlreadyInitialized(FsmetaError):
    """Raised by ``init`` when a repository already exists at or above the directory."""

    exit_code = ExitCode.CONFLICT

    def __init__(self, root: object) -> None:
        super().__init__(f"A repository already exists at {root}")
        self.root = root


class PathOutsideRoot(FsmetaError):
    """Raised when a path does not resolve to a location under the root."""

    exit_code = ExitCode.INVALID_INPUT

    def __init__(self, path: object, root: object) -> None:
        super().__init__(f"{path} is outside the repository root {root}")
        self.path = path
        self.root = root


class InvalidPath(FsmetaError):
    """Raised when a path cannot be stored as a UTF-8 key (undecodable file name)."""

    exit_code = ExitCode.INVALID_INPUT

    def __init__(self, path: object) -> None:
        super().__init__(f"{path!r} is not valid UTF-8 and cannot be stored")
        self.path = path


# ---------------------------------------------------------------------------
# Repository contents
# ---------------------------------------------------------------------------


class CollectionExists(FsmetaError):
    exit_code = ExitCode.CONFLICT

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection already exists: {name}")
        self.name = name


class CollectionNotFound(FsmetaError):
    exit_code = ExitCode.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection not found: {name}")
        self.name = name


class EntryNotFound(FsmetaError):
    exit_code = ExitCode.NOT_FOUND

    def __init__(self, key: str) -> None:
        super().__init__(f"No entry for {key}")
        self.key = key


class EntryExists(FsmetaError):
    exit_code = ExitCode.CONFLICT

    def __init__(self, key: str) -> None:
        super().__init__(f"An entry already exists for {key}")
        self.key = key


class TagNotFound(FsmetaError):
    exit_code = ExitCode.NOT_FOUND

    def __init__(self, scope: str, key: str) -> None:
        super().__init__(f"{scope}: tag {key!r} does not exist")
        self.scope = scope
        self.key = key


class TagTypeMismatch(FsmetaError):
    """Raised when a tag holds a value of a different kind than the caller needs."""

    exit_code = ExitCode.INVALID_INPUT

    def __init__(self, scope: str, key: str, expected: str, actual: str) -> None:
        super().__init__(f"{scope}: tag {key!r} is {actual}, expected {expected}")
        self.scope = scope
        self.key = key
        self.expected = expected
        self.actual = actual


class InvalidTagKey(FsmetaError):
    exit_code = ExitCode.INVALID_INPUT


class InvalidTagValue(FsmetaError):
    """Raised when a value given for a strictly typed tag does not parse as that type."""

    exit_code = ExitCode.INVALID_INPUT


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class StorageError(FsmetaError):
    """Raised when the state file cannot be read or written."""

    exit_code = ExitCode.IO_ERROR


class DecodeError(StorageError):
    """Raised when persisted state is corrupt or does not match its format."""

    exit_code = ExitCode.DATA_ERROR


class RepositoryBusy(StorageError):
    """Raised when another process holds the repository lock. Safe to retry."""

    exit_code = ExitCode.BUSY

    def __init__(self, marker: object) -> None:
        super().__init__(f"Repository {marker} is locked by another process; try again")
        self.marker = marker


class OpenError(FsmetaError):
    """Raised when the external opener fails."""
