"""Unit and address helpers for handing amounts to the wallet.

The ledger works in ETH decimal strings; contracts take wei integers and
checksummed addresses. These helpers do the conversion exactly.
"""

from __future__ import annotations

from decimal import Decimal

from web3 import Web3

from flowfi.models.ledger import parse_amount


def eth_to_wei(amount: str) -> int:
    """Convert an ETH decimal string to wei. Sub-wei fractions are truncated."""
    return int(Web3.to_wei(parse_amount(amount), "ether"))


def wei_to_eth(wei: int) -> Decimal:
    return Decimal(Web3.from_wei(wei, "ether"))


def is_address(value: str) -> bool:
    """True for a 20-byte hex address (checksum enforced if mixed case)."""
    if not isinstance(value, str) or not Web3.is_address(value):
        return False
    digits = value[2:] if value[:2] in ("0x", "0X") else value
    if digits != digits.lower() and digits != digits.upper():
        return bool(Web3.is_checksum_address(value))
    return True


def checksum_address(value: str) -> str:
    """EIP-55 checksummed form. Raises ValueError for a non-address."""
    if not is_address(value):
        raise ValueError(f"Invalid Ethereum address: {value!r}")
    return Web3.to_checksum_address(value)
