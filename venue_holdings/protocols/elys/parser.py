"""Pure parsing functions for Elys stablestake / commitment / masterchef — no I/O."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..base import parse_amount, parse_decimal, require

# USDC pool id (math.MaxInt16 on chain) uses the legacy share denom
USDC_POOL_ID = 32767

# Reward denoms as they must appear in the masterchef query string
USDC_REWARD_DENOM = (
    "ibc%2FF082B65C88E4B6D5EF1DB243CDA1D331D002759E938A0F5CD3FFDC5D53B3E349"
)
EDEN_REWARD_DENOM = "ueden"
REWARD_DENOMS = (USDC_REWARD_DENOM, EDEN_REWARD_DENOM)


@dataclass(frozen=True)
class StableStakePool:
    deposit_denom: str
    net_amount: int
    redemption_rate: float


def share_denom(pool_id: int) -> str:
    if pool_id == USDC_POOL_ID:
        return "stablestake/share"
    return f"stablestake/share/pool/{pool_id}"


def parse_pool(data: Any) -> StableStakePool:
    pool = require(data, "pool", dict)
    return StableStakePool(
        deposit_denom=require(pool, "deposit_denom", str, "pool.deposit_denom"),
        net_amount=parse_amount(pool.get("net_amount"), "pool.net_amount"),
        redemption_rate=parse_decimal(
            pool.get("redemption_rate", "1"), "pool.redemption_rate"
        ),
    )


def parse_committed_amount(data: Any, denom: str) -> int:
    """Committed amount of ``denom`` in ``total_committed`` (0 when absent)."""
    for entry in require(data, "total_committed", list):
        if isinstance(entry, dict) and entry.get("denom") == denom:
            return parse_amount(entry.get("amount"), "total_committed.amount")
    return 0


def parse_user_reward(data: Any) -> tuple[str, float]:
    """``user_reward_info`` -> (reward denom, pending raw amount)."""
    info = require(data, "user_reward_info", dict)
    return (
        require(info, "reward_denom", str, "user_reward_info.reward_denom"),
        parse_decimal(info.get("reward_pending"), "user_reward_info.reward_pending"),
    )
