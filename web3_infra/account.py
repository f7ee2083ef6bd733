"""Signer capability for typed-data messages.

``TypedDataSigner`` is the narrow interface the config builder depends on.
``LocalAccountSigner`` implements it over an ``eth_account`` local key;
signing is CPU-bound (elliptic-curve math), so it runs in a
``ProcessPoolExecutor`` to keep the asyncio event loop free.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Protocol

import structlog
from eth_account import Account
from eth_account.messages import encode_typed_data

logger = structlog.get_logger("web3_infra.account")


class TypedDataSigner(Protocol):
    """Anything that holds key material and signs EIP-712 typed data."""

    async def sign_typed_data(self, envelope: dict[str, Any]) -> Any:
        """Return a signature over ``envelope``."""
        ...


# ── Module-level signing function (must be picklable for multiprocessing) ──


def _sign_typed_data_sync(envelope: dict[str, Any], private_key: str) -> str:
    """Sign ``envelope`` in a worker process; return a 0x-prefixed hex signature."""
    signable = encode_typed_data(full_message=envelope)
    signed = Account.sign_message(signable, private_key=private_key)
    return "0x" + bytes(signed.signature).hex()


# ── Async signer class ──────────────────────────────────────────────


class LocalAccountSigner:
    """Async typed-data signer backed by a local private key and a process pool.

    Parameters
    ----------
    private_key:
        Hex-encoded secp256k1 private key (``0x`` prefix optional).
    max_workers:
        Number of processes in the signing pool.  Defaults to 1.
    """

    def __init__(self, private_key: str, max_workers: int = 1) -> None:
        # Raises ValueError on malformed keys before any pool is started.
        self._address: str = Account.from_key(private_key).address
        self._private_key = private_key
        self._max_workers = max_workers
        self._pool: ProcessPoolExecutor | None = None

    @property
    def address(self) -> str:
        """Checksummed address of the signing key."""
        return self._address

    # ── Lifecycle ────────────────────────────────────────────────

    def start(self) -> None:
        """Start the process pool.  Idempotent."""
        if self._pool is None:
            self._pool = ProcessPoolExecutor(max_workers=self._max_workers)
            logger.info(
                "account.signer_started",
                address=self._address,
                max_workers=self._max_workers,
            )

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the process pool."""
        if self._pool is not None:
            self._pool.shutdown(wait=wait)
            self._pool = None
            logger.info("account.signer_shutdown", address=self._address)

    # ── Signing ──────────────────────────────────────────────────

    async def sign_typed_data(self, envelope: dict[str, Any]) -> str:
        """Sign a typed-data envelope asynchronously (offloaded to the pool).

        Raises
        ------
        RuntimeError
            If the signer has not been started.
        """
        if self._pool is None:
            raise RuntimeError(
                "LocalAccountSigner not started — call start() first"
            )

        loop = asyncio.get_running_loop()
        signature = await loop.run_in_executor(
            self._pool,
            _sign_typed_data_sync,
            envelope,
            self._private_key,
        )

        logger.debug(
            "account.signed_typed_data",
            address=self._address,
            primary_type=envelope.get("primaryType"),
        )
        return signature

    # ── Context manager ──────────────────────────────────────────

    async def __aenter__(self) -> LocalAccountSigner:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.shutdown(wait=True)
