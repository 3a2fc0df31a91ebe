"""Reward policy — tier thresholds, reward rates and vault APY.

The recognized configuration is fixed:

    thresholds (ETH): BRONZE 0, SILVER 0.1, GOLD 0.5, PLATINUM 2.0
    reward rates:     BRONZE 1%, SILVER 1.5%, GOLD 2%, PLATINUM 2.5%
    vault APY:        5% (simple, applied as a daily rate)

A config directory may override any of these through reward_params.json.
Values are read as strings into Decimal so no precision is lost on load.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from flowfi.models.ledger import TIER_ORDER, Tier


PARAMS_FILE = "reward_params.json"

DEFAULT_TIER_THRESHOLDS: Dict[Tier, Decimal] = {
    Tier.BRONZE: Decimal("0"),
    Tier.SILVER: Decimal("0.1"),
    Tier.GOLD: Decimal("0.5"),
    Tier.PLATINUM: Decimal("2.0"),
}

DEFAULT_REWARD_RATES: Dict[Tier, Decimal] = {
    Tier.BRONZE: Decimal("0.01"),
    Tier.SILVER: Decimal("0.015"),
    Tier.GOLD: Decimal("0.02"),
    Tier.PLATINUM: Decimal("0.025"),
}

DEFAULT_VAULT_APY = Decimal("0.05")
DEFAULT_SPLIT_WINDOW_HOURS = 24
DEFAULT_RECENT_PAYMENTS_LIMIT = 5
DEFAULT_REWARD_DECIMAL_PLACES = 6


def _tier_table(raw: Mapping[str, Any], name: str) -> Dict[Tier, Decimal]:
    missing = [t.value for t in TIER_ORDER if t.value not in raw]
    if missing:
        raise ValueError(f"{name} missing tiers: {', '.join(missing)}")
    return {t: Decimal(str(raw[t.value])) for t in TIER_ORDER}


@dataclass(frozen=True)
class RewardPolicy:
    """Resolved reward parameters.

    Usage:
        policy = RewardPolicy.from_config_dir(config_dir)
        tier = policy.tier_for(Decimal("0.65"))     # Tier.GOLD
        rate = policy.rate_for(tier)                # Decimal("0.02")
    """
    tier_thresholds: Dict[Tier, Decimal]
    reward_rates: Dict[Tier, Decimal]
    vault_apy: Decimal = DEFAULT_VAULT_APY
    split_window_hours: int = DEFAULT_SPLIT_WINDOW_HOURS
    recent_payments_limit: int = DEFAULT_RECENT_PAYMENTS_LIMIT
    reward_decimal_places: int = DEFAULT_REWARD_DECIMAL_PLACES

    def __post_init__(self) -> None:
        thresholds = [self.tier_thresholds[t] for t in TIER_ORDER]
        if thresholds[0] != Decimal("0"):
            raise ValueError(
                f"BRONZE threshold must be 0, got {thresholds[0]}"
            )
        for lower, upper in zip(thresholds, thresholds[1:]):
            if upper <= lower:
                raise ValueError(
                    f"Tier thresholds must ascend strictly: {thresholds}"
                )
        for tier in TIER_ORDER:
            rate = self.reward_rates[tier]
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"Reward rate for {tier.value} out of range: {rate}")
        if self.vault_apy < 0:
            raise ValueError(f"Vault APY must be non-negative: {self.vault_apy}")
        if self.split_window_hours <= 0:
            raise ValueError(
                f"Split window must be positive: {self.split_window_hours}"
            )

    @classmethod
    def defaults(cls) -> RewardPolicy:
        return cls(
            tier_thresholds=dict(DEFAULT_TIER_THRESHOLDS),
            reward_rates=dict(DEFAULT_REWARD_RATES),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RewardPolicy:
        """Build a policy from parsed config, defaulting absent keys."""
        thresholds = (
            _tier_table(data["tier_thresholds_eth"], "tier_thresholds_eth")
            if "tier_thresholds_eth" in data
            else dict(DEFAULT_TIER_THRESHOLDS)
        )
        rates = (
            _tier_table(data["tier_reward_rates"], "tier_reward_rates")
            if "tier_reward_rates" in data
            else dict(DEFAULT_REWARD_RATES)
        )
        return cls(
            tier_thresholds=thresholds,
            reward_rates=rates,
            vault_apy=Decimal(str(data.get("vault_apy", DEFAULT_VAULT_APY))),
            split_window_hours=int(
                data.get("split_window_hours", DEFAULT_SPLIT_WINDOW_HOURS)
            ),
            recent_payments_limit=int(
                data.get("recent_payments_limit", DEFAULT_RECENT_PAYMENTS_LIMIT)
            ),
            reward_decimal_places=int(
                data.get("reward_decimal_places", DEFAULT_REWARD_DECIMAL_PLACES)
            ),
        )

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> RewardPolicy:
        """Load reward_params.json from a config directory.

        A missing file yields the default policy.
        """
        path = Path(config_dir) / PARAMS_FILE
        if not path.exists():
            return cls.defaults()
        with path.open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def tier_for(self, total: Decimal) -> Tier:
        """Highest tier whose threshold does not exceed total."""
        result = TIER_ORDER[0]
        for tier in TIER_ORDER:
            if total >= self.tier_thresholds[tier]:
                result = tier
        return result

    def rate_for(self, tier: Tier) -> Decimal:
        return self.reward_rates[tier]

    def threshold_for(self, tier: Tier) -> Decimal:
        return self.tier_thresholds[tier]

    def next_tier(self, tier: Tier) -> Optional[Tier]:
        """The tier above, or None at the top."""
        idx = tier.rank
        if idx == len(TIER_ORDER) - 1:
            return None
        return TIER_ORDER[idx + 1]

    @property
    def split_window(self) -> timedelta:
        return timedelta(hours=self.split_window_hours)

    @property
    def reward_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.reward_decimal_places)
