from __future__ import annotations

import random
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

from web3 import Web3

from teadrip.config import AMOUNT_PLACES, ConfigError


_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)

Number = Union[Decimal, str, int, float]


def random_amount(min_amount: Number, max_amount: Number, rng=random) -> Decimal:
    """Uniform amount in [min_amount, max_amount), cut to 6 decimal places.

    Equal bounds yield that amount. An inverted range is a configuration
    mistake and raises ConfigError.
    """
    lo, hi = Decimal(str(min_amount)), Decimal(str(max_amount))
    if lo > hi:
        raise ConfigError(f"min amount {lo} is greater than max amount {hi}")
    raw = lo + (hi - lo) * Decimal(repr(rng.random()))
    try:
        return raw.quantize(_QUANTUM, rounding=ROUND_DOWN)
    except InvalidOperation as exc:
        raise ConfigError(f"amount range {lo}..{hi} is too large") from exc


def to_base_units(amount: Number) -> int:
    """Ether-style amount to wei (18 decimals)."""
    return int(Web3.to_wei(Decimal(str(amount)), "ether"))
