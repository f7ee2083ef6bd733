"""Sign a storage-node system config as typed data.

The returned payload is the exact byte sequence the node verifies the
signature against, so callers must forward it unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from models.system_config import SystemConfig
from web3_infra.account import TypedDataSigner
from web3_infra.typed_data import build_config_typed_data, encode_typed_data_payload


class SignedPayload(NamedTuple):
    """Signature plus the UTF-8 JSON bytes of the envelope it covers."""

    signature: Any
    payload: bytes


async def generate_config_signature(
    account: TypedDataSigner,
    config: SystemConfig | Mapping[str, Any],
) -> SignedPayload:
    """Build the setup typed data for ``config``, sign it and serialize it.

    The signer is awaited exactly once with the full envelope; whatever it
    returns is passed through unchanged, and whatever it raises propagates
    to the caller.
    """
    if account is None:
        raise TypeError("account must not be None")

    envelope = build_config_typed_data(config)
    signature = await account.sign_typed_data(envelope)
    return SignedPayload(signature, encode_typed_data_payload(envelope))
