"""FlowFi CLI — command-line front end for the local reward ledger.

Usage:
    flowfi stats
    flowfi pay --merchant 0x... --amount 0.05 --description "coffee"
    flowfi payments --limit 10
    flowfi split-create --amount 0.02 --participant 0x... --participant 0x... --description lunch
    flowfi split-contribute --id split_...
    flowfi splits
    flowfi vault-deposit --amount 1.0
    flowfi vault-withdraw --amount 0.5
    flowfi tier
    flowfi network --tx 0xabc...
    flowfi reset

Settings can come from a .env file: FLOWFI_CONFIG_DIR, FLOWFI_DATA_DIR.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from flowfi.chain.network import NetworkConfig
from flowfi.chain.units import eth_to_wei
from flowfi.formatting import format_address, format_currency, stats_to_display
from flowfi.models.ledger import InvalidAmountError, parse_amount
from flowfi.persistence import codec
from flowfi.persistence.storage import JsonFileStorage
from flowfi.policy.resolver import RewardPolicy
from flowfi.rewards.calculator import LedgerCalculator
from flowfi.rewards.tiers import quantize_amount
from flowfi.validation import validate_payment, validate_split, validate_vault


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"
DEFAULT_DATA = Path(__file__).resolve().parents[2] / "data"


def _make_calculator(args: argparse.Namespace) -> LedgerCalculator:
    """Create a LedgerCalculator with file persistence."""
    policy = RewardPolicy.from_config_dir(args.config)
    return LedgerCalculator(policy, storage=JsonFileStorage(args.data))


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _fail(errors: list[str]) -> int:
    print(f"Failed: {'; '.join(errors)}", file=sys.stderr)
    return 1


def cmd_stats(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    _print_json(stats_to_display(calculator.stats()))
    return 0


def cmd_pay(args: argparse.Namespace) -> int:
    errors = validate_payment(args.merchant, args.amount, args.description)
    if errors:
        return _fail(errors)
    calculator = _make_calculator(args)
    payment = calculator.add_payment(args.amount, args.merchant, args.description)
    data = codec.payment_to_dict(payment)
    data["amountWei"] = eth_to_wei(payment.amount)
    data["tier"] = calculator.user_tier().value
    _print_json(data)
    return 0


def cmd_payments(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    payments = calculator.recent_payments(args.limit)
    _print_json([codec.payment_to_dict(p) for p in payments])
    return 0


def cmd_split_create(args: argparse.Namespace) -> int:
    participants = args.participant or []
    errors = validate_split(args.amount, participants, args.description, args.merchant)
    if errors:
        return _fail(errors)
    calculator = _make_calculator(args)
    creator = args.creator or participants[0]
    split = calculator.add_split(args.amount, participants, args.description, creator)
    data = codec.split_to_dict(split)
    data["participants"] = [format_address(p) for p in split.participants]
    data["deadline"] = codec.encode_timestamp(
        split.deadline(calculator.policy.split_window)
    )
    _print_json(data)
    return 0


def cmd_split_contribute(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    if not calculator.contribute_split(args.id):
        return _fail([f"Split {args.id} not found or no longer pending"])
    split = calculator.get_split(args.id)
    print(
        f"Contributed {format_currency(split.user_contribution)} to split {args.id}"
    )
    return 0


def cmd_splits(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    _print_json([codec.split_to_dict(s) for s in calculator.active_splits()])
    return 0


def cmd_vault(args: argparse.Namespace) -> int:
    wallet_balance = None
    if getattr(args, "wallet_balance", None) is not None:
        try:
            wallet_balance = parse_amount(args.wallet_balance)
        except InvalidAmountError:
            return _fail(["Wallet balance must be a valid number"])
    calculator = _make_calculator(args)
    errors = validate_vault(
        args.action, args.amount, calculator.current_vault_balance(), wallet_balance
    )
    if errors:
        return _fail(errors)
    if args.action == "deposit":
        record = calculator.add_vault_deposit(args.amount)
    else:
        record = calculator.add_vault_withdrawal(args.amount)
    data = codec.vault_to_dict(record)
    data["amountWei"] = eth_to_wei(record.amount)
    data["vaultBalance"] = quantize_amount(calculator.current_vault_balance(), 4)
    _print_json(data)
    return 0


def cmd_tier(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    tier = calculator.user_tier()
    progress = calculator.tier_progress()
    _print_json({
        "tier": tier.value,
        "rewardRate": str(calculator.policy.rate_for(tier)),
        "current": quantize_amount(progress.current, 4),
        "next": quantize_amount(progress.next, 4),
        "progress": quantize_amount(progress.progress, 2),
    })
    return 0


def cmd_network(args: argparse.Namespace) -> int:
    network = NetworkConfig.from_config_dir(args.config)
    if args.tx:
        print(network.explorer_tx_url(args.tx))
        return 0
    _print_json(network.to_dict())
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    calculator = _make_calculator(args)
    calculator.reset()
    print("Ledger reset")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowfi",
        description="FlowFi — local payment, split and vault reward ledger",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("FLOWFI_CONFIG_DIR", DEFAULT_CONFIG)),
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(os.getenv("FLOWFI_DATA_DIR", DEFAULT_DATA)),
        help="Path to ledger data directory (default: data/)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # stats
    sub.add_parser("stats", help="Show dashboard statistics")

    # pay
    p_pay = sub.add_parser("pay", help="Record a merchant payment")
    p_pay.add_argument("--merchant", required=True, help="Merchant address")
    p_pay.add_argument("--amount", required=True, help="Amount in ETH (Decimal)")
    p_pay.add_argument("--description", required=True, help="Payment description")

    # payments
    p_list = sub.add_parser("payments", help="List recent payments")
    p_list.add_argument("--limit", type=int, default=None, help="Number of payments")

    # split-create
    p_split = sub.add_parser("split-create", help="Create a split bill")
    p_split.add_argument("--amount", required=True, help="Total amount in ETH (Decimal)")
    p_split.add_argument(
        "--participant", action="append",
        help="Participant address (repeat; first is the creator)",
    )
    p_split.add_argument("--description", required=True, help="Split description")
    p_split.add_argument("--creator", help="Creator address (default: first participant)")
    p_split.add_argument("--merchant", help="Optional merchant address")

    # split-contribute
    p_contrib = sub.add_parser("split-contribute", help="Pay your share of a split")
    p_contrib.add_argument("--id", required=True, help="Split ID")

    # splits
    sub.add_parser("splits", help="List active splits (expires overdue ones)")

    # vault-deposit / vault-withdraw
    p_dep = sub.add_parser("vault-deposit", help="Deposit into the yield vault")
    p_dep.add_argument("--amount", required=True, help="Amount in ETH (Decimal)")
    p_dep.add_argument("--wallet-balance", help="Wallet balance to check against")
    p_dep.set_defaults(action="deposit")

    p_wd = sub.add_parser("vault-withdraw", help="Withdraw from the yield vault")
    p_wd.add_argument("--amount", required=True, help="Amount in ETH (Decimal)")
    p_wd.set_defaults(action="withdraw")

    # tier
    sub.add_parser("tier", help="Show reward tier and progress")

    # network
    p_net = sub.add_parser("network", help="Show network and contract configuration")
    p_net.add_argument("--tx", help="Print the explorer URL for a transaction hash")

    # reset
    sub.add_parser("reset", help="Clear all local ledger data")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "stats": cmd_stats,
        "pay": cmd_pay,
        "payments": cmd_payments,
        "split-create": cmd_split_create,
        "split-contribute": cmd_split_contribute,
        "splits": cmd_splits,
        "vault-deposit": cmd_vault,
        "vault-withdraw": cmd_vault,
        "tier": cmd_tier,
        "network": cmd_network,
        "reset": cmd_reset,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
