"""Pure parsing functions for Nolus LPP contract responses — no I/O."""
from __future__ import annotations

from typing import Any

from ...errors import MalformedResponseError
from ..base import parse_amount, parse_decimal, require


def parse_share_price(data: Any) -> float:
    """``price`` -> underlying per share (``amount_quote.amount / amount.amount``)."""
    amount = parse_decimal(
        require(require(data, "amount", dict), "amount", str, "amount.amount"),
        "amount.amount",
    )
    quote = parse_decimal(
        require(
            require(data, "amount_quote", dict), "amount", str, "amount_quote.amount"
        ),
        "amount_quote.amount",
    )
    if amount == 0:
        raise MalformedResponseError("amount.amount", "zero share amount")
    return quote / amount


def parse_pool_shares(data: Any) -> int:
    balance = require(data, "balance_nlpn", dict)
    return parse_amount(balance.get("amount"), "balance_nlpn.amount")


def parse_balance_shares(data: Any) -> int:
    return parse_amount(require(data, "balance", (str, int)), "balance")


def parse_reward_shares(data: Any) -> int:
    rewards = require(data, "rewards", dict)
    return parse_amount(rewards.get("amount"), "rewards.amount")
