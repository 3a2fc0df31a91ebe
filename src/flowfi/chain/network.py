"""Network configuration — the testnet and the deployed FlowFi contracts.

Defaults are the Morph Holesky testnet deployment. A config directory may
override them through network.json.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

from flowfi.chain.units import checksum_address


NETWORK_FILE = "network.json"

DEFAULT_CONTRACTS: Dict[str, str] = {
    "FLOWFI_CORE": "0xC3d8AfB3462f726Db9d793DefdCFC67D7E12DBa3",
    "REWARDS_MANAGER": "0xfF0e7F71a0e19E0BF037Bd90Ba30A2Ee409E53a7",
    "SPLIT_PAYMENTS": "0xe4ab654a03826E15039913D0D0E1E4Af2117bA0d",
    "YIELD_VAULT": "0x3b4cAE62020487263Fc079312f9199a1b014BF6b",
}


@dataclass(frozen=True)
class NetworkConfig:
    """Chain parameters and contract addresses.

    Usage:
        network = NetworkConfig.from_config_dir(config_dir)
        vault = network.contract_address("YIELD_VAULT")
        url = network.explorer_tx_url(tx_hash)
    """
    chain_id: int = 2810
    name: str = "Morph Holesky Testnet"
    rpc_url: str = "https://rpc-quicknode-holesky.morphl2.io"
    explorer_url: str = "https://explorer-holesky.morphl2.io"
    currency_symbol: str = "ETH"
    currency_decimals: int = 18
    testnet: bool = True
    contracts: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CONTRACTS))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkConfig:
        defaults = cls()
        currency = data.get("native_currency", {})
        contracts = dict(DEFAULT_CONTRACTS)
        contracts.update(data.get("contracts", {}))
        return cls(
            chain_id=int(data.get("chain_id", defaults.chain_id)),
            name=data.get("name", defaults.name),
            rpc_url=data.get("rpc_url", defaults.rpc_url),
            explorer_url=data.get("explorer_url", defaults.explorer_url).rstrip("/"),
            currency_symbol=currency.get("symbol", defaults.currency_symbol),
            currency_decimals=int(currency.get("decimals", defaults.currency_decimals)),
            testnet=bool(data.get("testnet", defaults.testnet)),
            contracts=contracts,
        )

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> NetworkConfig:
        path = Path(config_dir) / NETWORK_FILE
        if not path.exists():
            return cls()
        with path.open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def contract_address(self, name: str) -> str:
        """Checksummed address of a deployed contract."""
        address = self.contracts.get(name)
        if address is None:
            raise ValueError(
                f"Unknown contract: {name}. Known: {', '.join(sorted(self.contracts))}"
            )
        return checksum_address(address.lower())

    def explorer_tx_url(self, tx_hash: str) -> str:
        if not tx_hash.startswith("0x"):
            tx_hash = f"0x{tx_hash}"
        return f"{self.explorer_url}/tx/{tx_hash}"

    def explorer_address_url(self, address: str) -> str:
        return f"{self.explorer_url}/address/{checksum_address(address)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "name": self.name,
            "rpc_url": self.rpc_url,
            "explorer_url": self.explorer_url,
            "native_currency": {
                "symbol": self.currency_symbol,
                "decimals": self.currency_decimals,
            },
            "testnet": self.testnet,
            "contracts": {k: checksum_address(v.lower()) for k, v in self.contracts.items()},
        }
