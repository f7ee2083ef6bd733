"""Config signature CLI — sign and verify storage-node setup payloads.

Usage:
    python3 -m cli.config_sig sign config.json
    python3 -m cli.config_sig verify <signature> <payload-hex>
    python3 -m cli.config_sig verify <signature> <payload-hex> --admin 0x...

``sign`` reads the key from ``SIGNER_PRIVATE_KEY``.  ``verify --admin``
also runs the admin check and prints the config the node would apply,
using the node defaults from settings for missing fields.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from config.settings import settings
from core.logger import get_logger
from models.system_config import NodeSystemConfig, SystemConfig
from web3_infra.account import LocalAccountSigner
from web3_infra.config_signer import generate_config_signature
from web3_infra.setup_verifier import (
    PermissionDeniedError,
    SetupVerificationError,
    apply_setup,
    verify_setup,
)

logger = get_logger("cli.config_sig")


def _node_defaults() -> NodeSystemConfig:
    return NodeSystemConfig(
        min_rollup_size=settings.MIN_ROLLUP_SIZE,
        rollup_interval=settings.ROLLUP_INTERVAL_MS,
        network_id=settings.NETWORK_ID,
        evm_node_url=settings.EVM_NODE_URL,
        ar_node_url=settings.AR_NODE_URL,
    )


def _print_json(obj: dict[str, Any]) -> None:
    print(json.dumps(obj, indent=2))


async def cmd_sign(args: argparse.Namespace) -> int:
    """Sign a config file and print the signature with the hex payload."""
    if not settings.SIGNER_PRIVATE_KEY:
        print("ERROR: SIGNER_PRIVATE_KEY is not set", file=sys.stderr)
        return 1

    try:
        raw = json.loads(Path(args.config).read_text(encoding="utf-8"))
        config = SystemConfig.model_validate(raw)
    except (OSError, ValueError, ValidationError) as exc:
        print(f"ERROR: cannot load config {args.config}: {exc}", file=sys.stderr)
        return 1

    async with LocalAccountSigner(
        settings.SIGNER_PRIVATE_KEY,
        max_workers=settings.SIGNER_MAX_WORKERS,
    ) as signer:
        signature, payload = await generate_config_signature(signer, config)

    logger.info("config_sig.signed", address=signer.address, payload_size=len(payload))
    _print_json({
        "address": signer.address,
        "signature": signature,
        "payload": "0x" + payload.hex(),
    })
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Recover the signer of a payload and optionally apply the admin check."""
    text = args.payload[2:] if args.payload.startswith("0x") else args.payload
    try:
        payload = bytes.fromhex(text)
    except ValueError as exc:
        print(f"ERROR: payload is not hex: {exc}", file=sys.stderr)
        return 1

    try:
        if args.admin:
            applied = apply_setup(payload, args.signature, args.admin, _node_defaults())
            _print_json({"admin": args.admin, "applied": applied.model_dump()})
        else:
            address, data = verify_setup(payload, args.signature)
            _print_json({"address": address, "message": data.get("message", {})})
    except (SetupVerificationError, PermissionDeniedError) as exc:
        logger.warning("config_sig.verify_failed", error=str(exc))
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="config-sig",
        description="Sign and verify storage-node setup payloads",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_sign = sub.add_parser("sign", help="Sign a SystemConfig JSON file")
    p_sign.add_argument("config", help="Path to a JSON file with the nine config fields")

    p_verify = sub.add_parser("verify", help="Recover the signer of a payload")
    p_verify.add_argument("signature", help="0x-prefixed 65-byte hex signature")
    p_verify.add_argument("payload", help="Hex-encoded payload bytes")
    p_verify.add_argument(
        "--admin",
        default=settings.ADMIN_ADDR or None,
        help="Expected admin address (default: ADMIN_ADDR)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "sign":
        return asyncio.run(cmd_sign(args))
    return cmd_verify(args)


if __name__ == "__main__":
    sys.exit(main())
