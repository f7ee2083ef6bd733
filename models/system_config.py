"""SystemConfig — storage-node configuration as signed by the admin."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SystemConfig(BaseModel):
    """Configuration record carried in the ``Message`` of the setup typed data.

    Every field is a string on the wire, numeric ones included.  Attributes
    are snake_case; the camelCase aliases are the wire names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rollup_interval: str = Field(..., alias="rollupInterval")
    min_rollup_size: str = Field(..., alias="minRollupSize")
    network: str = Field(..., alias="network")
    chain_id: str = Field(..., alias="chainId")
    contract_address: str = Field(..., alias="contractAddress")
    rollup_max_interval: str = Field(..., alias="rollupMaxInterval")
    evm_node_rpc: str = Field(..., alias="evmNodeRpc")
    ar_node_url: str = Field(..., alias="arNodeUrl")
    min_gc_offset: str = Field(..., alias="minGcOffset")

    def to_message(self) -> dict[str, str]:
        """Return the wire mapping, keys in declaration order."""
        return {
            "rollupInterval": self.rollup_interval,
            "minRollupSize": self.min_rollup_size,
            "network": self.network,
            "chainId": self.chain_id,
            "contractAddress": self.contract_address,
            "rollupMaxInterval": self.rollup_max_interval,
            "evmNodeRpc": self.evm_node_rpc,
            "arNodeUrl": self.ar_node_url,
            "minGcOffset": self.min_gc_offset,
        }


class NodeSystemConfig(BaseModel):
    """Configuration a storage node applies after a verified setup."""

    min_rollup_size: int = Field(..., ge=0)
    rollup_interval: int = Field(..., ge=0, description="Rollup interval in ms")
    network_id: int = Field(..., ge=0)
    evm_node_url: str
    ar_node_url: str
