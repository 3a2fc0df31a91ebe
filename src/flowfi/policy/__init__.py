"""Reward policy configuration."""

from flowfi.policy.resolver import RewardPolicy

__all__ = ["RewardPolicy"]
