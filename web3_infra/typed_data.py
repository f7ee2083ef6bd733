"""Typed-data envelope for the storage-node setup message.

The envelope follows the EIP-712 JSON shape (``types``, ``domain``,
``primaryType``, ``message``) with an empty domain and a single
``Message`` struct whose members are all ``string``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from models.system_config import SystemConfig

PRIMARY_TYPE = "Message"

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")

# Wire names of the ``Message`` members, in declaration order.
CONFIG_MESSAGE_FIELDS: tuple[str, ...] = (
    "rollupInterval",
    "minRollupSize",
    "network",
    "chainId",
    "contractAddress",
    "rollupMaxInterval",
    "evmNodeRpc",
    "arNodeUrl",
    "minGcOffset",
)


def build_config_typed_data(config: SystemConfig | Mapping[str, Any]) -> dict[str, Any]:
    """Build the typed-data envelope for ``config``.

    A ``SystemConfig`` is copied field by field in declaration order.  A
    plain mapping is shallow-copied as given: missing or extra keys are
    not checked, so ``message`` may hold fewer keys than ``types.Message``
    declares.  ``config`` itself is never mutated.
    """
    if isinstance(config, SystemConfig):
        message: dict[str, Any] = config.to_message()
    else:
        message = dict(config)

    return {
        "types": {
            "EIP712Domain": [],
            PRIMARY_TYPE: [{"name": name, "type": "string"} for name in CONFIG_MESSAGE_FIELDS],
        },
        "domain": {},
        "primaryType": PRIMARY_TYPE,
        "message": message,
    }


def encode_typed_data_payload(envelope: Mapping[str, Any]) -> bytes:
    """Serialize ``envelope`` to compact JSON and encode it as UTF-8.

    Keys keep their insertion order and non-ASCII characters are written
    as-is rather than escaped.  Lone surrogates cannot be encoded and are
    replaced with U+FFFD, so encoding never fails.
    """
    text = json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)
    return _LONE_SURROGATE.sub("\ufffd", text).encode("utf-8")


# (member, expected type) pairs every typed-data payload must carry.
_TYPED_DATA_MEMBERS: tuple[tuple[str, type], ...] = (
    ("types", dict),
    ("primaryType", str),
    ("domain", dict),
    ("message", dict),
)


def decode_typed_data_payload(payload: bytes) -> dict[str, Any]:
    """Parse a payload produced by ``encode_typed_data_payload``.

    Raises ``ValueError`` (``UnicodeDecodeError`` or
    ``json.JSONDecodeError``) on malformed input or a missing member, and
    ``TypeError`` when the JSON value or one of ``types``,
    ``primaryType``, ``domain``, ``message`` has the wrong type.
    """
    data = json.loads(payload.decode("utf-8"))
    if not isinstance(data, dict):
        raise TypeError(f"typed data must be a JSON object, got {type(data).__name__}")
    for name, expected in _TYPED_DATA_MEMBERS:
        if name not in data:
            raise ValueError(f"missing field `{name}`")
        if not isinstance(data[name], expected):
            raise TypeError(
                f"field `{name}` must be {expected.__name__}, got {type(data[name]).__name__}"
            )
    return data
