"""Chain helpers — network configuration and ETH/wei conversion."""

from flowfi.chain.network import NetworkConfig
from flowfi.chain.units import checksum_address, eth_to_wei, is_address, wei_to_eth

__all__ = [
    "NetworkConfig",
    "checksum_address",
    "eth_to_wei",
    "is_address",
    "wei_to_eth",
]
