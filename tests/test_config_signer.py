"""Tests for web3_infra/config_signer.py."""

from __future__ import annotations

import asyncio
import copy
import json
from typing import Any

import pytest

from models.system_config import SystemConfig
from web3_infra.config_signer import SignedPayload, generate_config_signature
from web3_infra.typed_data import CONFIG_MESSAGE_FIELDS

SCENARIO_CONFIG = {
    "rollupInterval": "10",
    "minRollupSize": "5",
    "network": "test",
    "chainId": "1",
    "contractAddress": "0xabc",
    "rollupMaxInterval": "20",
    "evmNodeRpc": "http://x",
    "arNodeUrl": "http://y",
    "minGcOffset": "100",
}

SCENARIO_JSON = (
    '{"types":{"EIP712Domain":[],"Message":['
    '{"name":"rollupInterval","type":"string"},'
    '{"name":"minRollupSize","type":"string"},'
    '{"name":"network","type":"string"},'
    '{"name":"chainId","type":"string"},'
    '{"name":"contractAddress","type":"string"},'
    '{"name":"rollupMaxInterval","type":"string"},'
    '{"name":"evmNodeRpc","type":"string"},'
    '{"name":"arNodeUrl","type":"string"},'
    '{"name":"minGcOffset","type":"string"}]},'
    '"domain":{},"primaryType":"Message",'
    '"message":{"rollupInterval":"10","minRollupSize":"5","network":"test",'
    '"chainId":"1","contractAddress":"0xabc","rollupMaxInterval":"20",'
    '"evmNodeRpc":"http://x","arNodeUrl":"http://y","minGcOffset":"100"}}'
)


class StubSigner:
    """Records every envelope and returns a fixed signature."""

    def __init__(self, signature: Any = "SIG123") -> None:
        self.signature = signature
        self.calls: list[dict[str, Any]] = []

    async def sign_typed_data(self, envelope: dict[str, Any]) -> Any:
        self.calls.append(copy.deepcopy(envelope))
        return self.signature


class FailingSigner:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def sign_typed_data(self, envelope: dict[str, Any]) -> Any:
        raise self.exc


class TestGenerateConfigSignature:

    @pytest.mark.asyncio
    async def test_scenario_bytes_exact(self) -> None:
        signature, payload = await generate_config_signature(StubSigner(), SCENARIO_CONFIG)
        assert signature == "SIG123"
        assert payload == SCENARIO_JSON.encode("utf-8")

    @pytest.mark.asyncio
    async def test_returns_signed_payload_pair(self) -> None:
        result = await generate_config_signature(StubSigner(), SCENARIO_CONFIG)
        assert isinstance(result, SignedPayload)
        assert isinstance(result.payload, bytes)
        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_model_and_mapping_give_same_bytes(self) -> None:
        model = SystemConfig.model_validate(SCENARIO_CONFIG)
        _, from_model = await generate_config_signature(StubSigner(), model)
        _, from_mapping = await generate_config_signature(StubSigner(), SCENARIO_CONFIG)
        assert from_model == from_mapping

    @pytest.mark.asyncio
    async def test_deterministic_for_equal_configs(self) -> None:
        other = dict(SCENARIO_CONFIG)
        _, p1 = await generate_config_signature(StubSigner("a"), SCENARIO_CONFIG)
        _, p2 = await generate_config_signature(StubSigner("b"), other)
        assert p1 == p2

    @pytest.mark.asyncio
    async def test_payload_round_trips_to_envelope(self) -> None:
        _, payload = await generate_config_signature(StubSigner(), SCENARIO_CONFIG)
        decoded = json.loads(payload.decode("utf-8"))
        assert decoded == {
            "types": {
                "EIP712Domain": [],
                "Message": [{"name": n, "type": "string"} for n in CONFIG_MESSAGE_FIELDS],
            },
            "domain": {},
            "primaryType": "Message",
            "message": SCENARIO_CONFIG,
        }

    @pytest.mark.asyncio
    async def test_signer_sees_envelope_that_was_serialized(self) -> None:
        signer = StubSigner()
        _, payload = await generate_config_signature(signer, SCENARIO_CONFIG)
        assert len(signer.calls) == 1
        assert signer.calls[0] == json.loads(payload)

    @pytest.mark.asyncio
    async def test_field_order_independent_of_input_order(self) -> None:
        reversed_config = dict(reversed(list(SCENARIO_CONFIG.items())))
        _, payload = await generate_config_signature(StubSigner(), reversed_config)
        declared = [f["name"] for f in json.loads(payload)["types"]["Message"]]
        assert declared == list(CONFIG_MESSAGE_FIELDS)

    @pytest.mark.asyncio
    async def test_signature_passed_through_unchanged(self) -> None:
        sentinel = object()
        signature, _ = await generate_config_signature(
            StubSigner(sentinel), {"network": "anything"}
        )
        assert signature is sentinel

    @pytest.mark.asyncio
    async def test_signer_error_propagates(self) -> None:
        exc = PermissionError("rejected by user")
        with pytest.raises(PermissionError) as info:
            await generate_config_signature(FailingSigner(exc), SCENARIO_CONFIG)
        assert info.value is exc

    @pytest.mark.asyncio
    async def test_input_not_mutated(self) -> None:
        config = dict(SCENARIO_CONFIG)
        signer = StubSigner()
        await generate_config_signature(signer, config)
        assert config == SCENARIO_CONFIG
        assert signer.calls[0]["message"] is not config

    @pytest.mark.asyncio
    async def test_partial_config_accepted(self) -> None:
        partial = {"network": "1", "chainId": "5"}
        _, payload = await generate_config_signature(StubSigner(), partial)
        decoded = json.loads(payload)
        assert decoded["message"] == partial
        assert len(decoded["types"]["Message"]) == 9

    @pytest.mark.asyncio
    async def test_non_ascii_written_as_utf8(self) -> None:
        config = dict(SCENARIO_CONFIG, network="téstnet")
        _, payload = await generate_config_signature(StubSigner(), config)
        assert "téstnet".encode("utf-8") in payload

    @pytest.mark.asyncio
    async def test_lone_surrogate_does_not_fail_after_signing(self) -> None:
        signer = StubSigner()
        signature, payload = await generate_config_signature(
            signer, dict(SCENARIO_CONFIG, network="\udc80")
        )
        assert signature == "SIG123"
        assert len(signer.calls) == 1
        assert json.loads(payload.decode("utf-8"))["message"]["network"] == "\ufffd"

    @pytest.mark.asyncio
    async def test_none_account_rejected(self) -> None:
        with pytest.raises(TypeError, match="must not be None"):
            await generate_config_signature(None, SCENARIO_CONFIG)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_concurrent_calls_independent(self) -> None:
        configs = [dict(SCENARIO_CONFIG, chainId=str(i)) for i in range(10)]
        results = await asyncio.gather(
            *(generate_config_signature(StubSigner(str(i)), c) for i, c in enumerate(configs))
        )
        for i, (signature, payload) in enumerate(results):
            assert signature == str(i)
            assert json.loads(payload)["message"]["chainId"] == str(i)
