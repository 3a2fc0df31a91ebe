"""Input validation for ledger operations.

The calculator does not validate amounts or addresses; a malformed amount
surfaces there as InvalidAmountError. Front ends run these checks first
and show the returned messages. Each function returns a list of errors,
empty when the input is acceptable.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Sequence

from flowfi.chain.units import is_address
from flowfi.models.ledger import InvalidAmountError, parse_amount


def _check_amount(amount: str, label: str = "Amount") -> tuple[List[str], Optional[Decimal]]:
    if amount is None or not str(amount).strip():
        return [f"{label} is required"], None
    try:
        value = parse_amount(amount)
    except InvalidAmountError:
        return [f"{label} must be a valid number"], None
    if value <= Decimal("0"):
        return [f"{label} must be greater than 0"], None
    return [], value


def validate_payment(merchant: str, amount: str, description: str) -> List[str]:
    errors: List[str] = []
    if not merchant:
        errors.append("Merchant address is required")
    elif not is_address(merchant):
        errors.append("Invalid Ethereum address")
    errors.extend(_check_amount(amount)[0])
    if not description or not description.strip():
        errors.append("Description is required")
    return errors


def validate_split(
    total_amount: str,
    participants: Sequence[str],
    description: str,
    merchant: Optional[str] = None,
) -> List[str]:
    """Check a split bill: at least two distinct, valid participant addresses."""
    errors = _check_amount(total_amount, "Total amount")[0]
    if not description or not description.strip():
        errors.append("Description is required")
    if merchant and not is_address(merchant):
        errors.append("Invalid merchant address")

    if len(participants) < 2:
        errors.append("At least 2 participants are required")
    for index, participant in enumerate(participants, 1):
        if not participant:
            errors.append(f"Participant {index}: Address is required")
        elif not is_address(participant):
            errors.append(f"Participant {index}: Invalid Ethereum address")

    lowered = [p.lower() for p in participants if p]
    if len(set(lowered)) != len(lowered):
        errors.append("Participants must be unique")
    return errors


def validate_vault(
    action: str,
    amount: str,
    vault_balance: Decimal,
    wallet_balance: Optional[Decimal] = None,
) -> List[str]:
    """Check a vault deposit or withdrawal against the known balances.

    wallet_balance is optional; without it deposits are not capped.
    """
    if action not in ("deposit", "withdraw"):
        return [f"Unknown vault action: {action}"]
    errors, value = _check_amount(amount)
    if value is None:
        return errors
    if action == "deposit" and wallet_balance is not None and value > wallet_balance:
        errors.append("Insufficient wallet balance")
    if action == "withdraw" and value > vault_balance:
        errors.append("Insufficient vault balance")
    return errors
