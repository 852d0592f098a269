"""fsmeta constants: filesystem layout, formats, and exit codes."""

from __future__ import annotations

from enum import Enum, IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    NOT_FOUND = 3
    CONFLICT = 4
    INVALID_INPUT = 5
    DATA_ERROR = 65  # EX_DATAERR: corrupt state file
    IO_ERROR = 74  # EX_IOERR
    BUSY = 75  # EX_TEMPFAIL: retryable


# ---------------------------------------------------------------------------
# Storage formats
# ---------------------------------------------------------------------------


class StorageFormat(str, Enum):
    JSON = "json"
    JSON_PRETTY = "json-pretty"
    BINARY = "binary"


STATE_FILENAMES: dict[StorageFormat, str] = {
    StorageFormat.JSON_PRETTY: "db.pretty.json",
    StorageFormat.JSON: "db.json",
    StorageFormat.BINARY: "db.msgpack",
}

# Lookup order when discovering which state file a marker directory holds.
FORMAT_SEARCH_ORDER: tuple[StorageFormat, ...] = (
    StorageFormat.JSON_PRETTY,
    StorageFormat.JSON,
    StorageFormat.BINARY,
)

DEFAULT_FORMAT = StorageFormat.JSON

# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

MARKER_DIR_NAME = ".fsm"
CONFIG_DIR_NAME = ".fsmeta"
CONFIG_FILENAME = "config.toml"

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

INVALID_TAG_CHARS = frozenset("\\:,!")
SELF_LABEL = "!SELF"  # display name of the repository-root scope
