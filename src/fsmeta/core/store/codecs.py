"""
State file codecs.

Three encodings of the same :class:`Repository`, looked up by
:class:`StorageFormat` in a flat table:

  json         compact JSON
  json-pretty  indented JSON; purely cosmetic, decodes to the same state
  binary       MessagePack

All three go through the pydantic JSON-mode dump, so any state that decodes
from one format decodes identically from the others.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import msgpack
from pydantic import ValidationError

from fsmeta.core.constants import StorageFormat
from fsmeta.core.exceptions import DecodeError
from fsmeta.core.store.model import Repository


@dataclass(frozen=True)
class Codec:
    encode: Callable[[Repository], bytes]
    decode: Callable[[bytes], Repository]


def _to_payload(state: Repository) -> dict[str, Any]:
    return state.model_dump(mode="json")


def _from_payload(payload: Any, label: str) -> Repository:
    if not isinstance(payload, dict):
        raise DecodeError(f"{label} state must be a mapping (got {type(payload).__name__})")
    try:
        return Repository.model_validate(payload)
    except ValidationError as exc:
        lines = [f"Invalid {label} state:"]
        for err in exc.errors():
            loc = " → ".join(str(x) for x in err["loc"]) if err["loc"] else "(root)"
            lines.append(f"  {loc}: {err['msg']}")
        raise DecodeError("\n".join(lines)) from exc


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _encode_json(state: Repository) -> bytes:
    return json.dumps(_to_payload(state), ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )


def _encode_json_pretty(state: Repository) -> bytes:
    text = json.dumps(_to_payload(state), ensure_ascii=False, indent=2, sort_keys=True)
    return (text + "\n").encode("utf-8")


def _decode_json(data: bytes) -> Repository:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Malformed JSON state: {exc}") from exc
    return _from_payload(payload, "JSON")


# ---------------------------------------------------------------------------
# MessagePack
# ---------------------------------------------------------------------------


def _encode_binary(state: Repository) -> bytes:
    return msgpack.packb(_to_payload(state), use_bin_type=True)


def _decode_binary(data: bytes) -> Repository:
    try:
        payload = msgpack.unpackb(data, raw=False)
    except Exception as exc:  # msgpack raises several unrelated types for bad input
        raise DecodeError(f"Malformed binary state: {exc}") from exc
    return _from_payload(payload, "binary")


CODECS: dict[StorageFormat, Codec] = {
    StorageFormat.JSON: Codec(encode=_encode_json, decode=_decode_json),
    StorageFormat.JSON_PRETTY: Codec(encode=_encode_json_pretty, decode=_decode_json),
    StorageFormat.BINARY: Codec(encode=_encode_binary, decode=_decode_binary),
}


def encode(state: Repository, fmt: StorageFormat | None = None) -> bytes:
    """Encode *state* in *fmt* (defaults to the state's own format marker)."""
    return CODECS[fmt or state.format].encode(state)


def decode(data: bytes, fmt: StorageFormat) -> Repository:
    """
    Decode *data* written in *fmt*.

    Raises:
        DecodeError: if the bytes are malformed or fail schema validation.
    """
    return CODECS[fmt].decode(data)
