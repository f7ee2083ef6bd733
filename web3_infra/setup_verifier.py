"""Node-side verification of a signed setup payload.

A setup request carries the JSON typed-data payload produced by
``generate_config_signature`` and the admin's hex signature.  The node
recovers the signer, checks it is the configured admin, and derives the
``NodeSystemConfig`` to apply, falling back to its current values for any
field the message leaves out.
"""

from __future__ import annotations

from typing import Any

import structlog
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import is_hex_address, to_checksum_address

from models.system_config import NodeSystemConfig
from web3_infra.typed_data import decode_typed_data_payload

logger = structlog.get_logger("web3_infra.setup_verifier")

U64_MAX = 2**64 - 1
SIGNATURE_LENGTH = 65


# ── Exceptions ───────────────────────────────────────────────────────


class SetupVerificationError(Exception):
    """Raised when a setup payload or signature cannot be verified."""
    pass


class PermissionDeniedError(Exception):
    """Raised when a valid setup payload was signed by someone other than the admin."""

    def __init__(self, message: str, address: str | None = None) -> None:
        super().__init__(message)
        self.address = address


# ── Field access ─────────────────────────────────────────────────────


def get_str_field(data: dict[str, Any], name: str, default_val: str) -> str:
    """Return ``message[name]`` if it is a string, else ``default_val``."""
    value = data.get("message", {}).get(name)
    if isinstance(value, str):
        return value
    return default_val


def _parse_u64(text: str) -> int | None:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= U64_MAX else None


def get_u64_field(data: dict[str, Any], name: str, default_val: int) -> int:
    """Return ``message[name]`` parsed as an unsigned 64-bit integer.

    Falls back to ``default_val`` when the field is absent, not a string,
    or not a valid u64.
    """
    value = data.get("message", {}).get(name)
    if not isinstance(value, str):
        return default_val
    parsed = _parse_u64(value)
    return default_val if parsed is None else parsed


# ── Verification ─────────────────────────────────────────────────────


def _parse_signature(signature: str) -> bytes:
    text = signature[2:] if signature[:2] in ("0x", "0X") else signature
    raw = bytes.fromhex(text)
    if len(raw) != SIGNATURE_LENGTH:
        raise ValueError(f"expected {SIGNATURE_LENGTH} bytes, got {len(raw)}")
    return raw


def verify_setup(payload: bytes, signature: str) -> tuple[str, dict[str, Any]]:
    """Recover the signer of a setup payload.

    Returns
    -------
    tuple[str, dict]
        Checksummed signer address and the parsed typed data.

    Raises
    ------
    SetupVerificationError
        If the payload is not typed-data JSON, the signature is not a
        65-byte hex string, or recovery over the typed data fails.
    """
    try:
        data = decode_typed_data_payload(payload)
    except (ValueError, TypeError) as exc:
        raise SetupVerificationError(f"bad typed data for err {exc}") from exc

    try:
        raw_signature = _parse_signature(signature)
    except ValueError as exc:
        raise SetupVerificationError(f"invalid signature for err {exc}") from exc

    try:
        signable = encode_typed_data(full_message=data)
        address = Account.recover_message(signable, signature=raw_signature)
    except Exception as exc:
        raise SetupVerificationError(f"invalid typed data for err {exc}") from exc

    logger.debug("setup_verifier.recovered", address=address)
    return address, data


def apply_setup(
    payload: bytes,
    signature: str,
    admin_addr: str,
    current: NodeSystemConfig,
) -> NodeSystemConfig:
    """Verify a setup request from the admin and build the config to apply.

    Raises
    ------
    SetupVerificationError
        On any verification failure, an invalid ``admin_addr`` or a
        non-numeric ``network``.
    PermissionDeniedError
        If the payload was signed by an address other than ``admin_addr``.
    """
    address, data = verify_setup(payload, signature)

    if not is_hex_address(admin_addr):
        raise SetupVerificationError(f"invalid admin address {admin_addr!r}")
    if to_checksum_address(admin_addr) != address:
        logger.warning(
            "setup_verifier.not_admin",
            address=address,
            admin=to_checksum_address(admin_addr),
        )
        raise PermissionDeniedError("You are not the admin", address=address)

    network = _parse_u64(get_str_field(data, "network", "0"))
    if network is None:
        raise SetupVerificationError(
            f"invalid network {get_str_field(data, 'network', '0')!r}"
        )

    applied = NodeSystemConfig(
        min_rollup_size=get_u64_field(data, "minRollupSize", current.min_rollup_size),
        rollup_interval=get_u64_field(data, "rollupInterval", current.rollup_interval),
        network_id=network,
        evm_node_url=get_str_field(data, "evmNodeRpc", current.evm_node_url),
        ar_node_url=get_str_field(data, "arNodeUrl", current.ar_node_url),
    )
    logger.info(
        "setup_verifier.applied",
        admin=address,
        network_id=applied.network_id,
        rollup_interval=applied.rollup_interval,
        min_rollup_size=applied.min_rollup_size,
    )
    return applied
