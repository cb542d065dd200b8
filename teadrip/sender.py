from __future__ import annotations

import random
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from teadrip.amounts import random_amount, to_base_units
from teadrip.recipients import normalize_address


@dataclass
class TransferAttempt:
    recipient: str
    amount: Optional[Decimal] = None
    success: bool = False
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


def send_native(
    client,
    recipient: str,
    min_amount: Decimal,
    max_amount: Decimal,
    symbol: str = "TEA",
    rng=random,
) -> TransferAttempt:
    """Send a random amount of the native token to one recipient.

    Every failure, from a malformed address to a reverted receipt, is
    printed and reported through the returned attempt; nothing is raised.
    """
    attempt = TransferAttempt(recipient=recipient)
    try:
        to_address = normalize_address(recipient)
        attempt.amount = random_amount(min_amount, max_amount, rng=rng)
        print(f"Sending {attempt.amount:.6f} {symbol} to {to_address}")

        attempt.tx_hash = client.send_value(to_address, to_base_units(attempt.amount))
        print(f"Transaction sent: {attempt.tx_hash}")

        attempt.block_number = client.wait_for_confirmation(attempt.tx_hash)
        print(f"Transaction confirmed in block {attempt.block_number}")
        attempt.success = True
    except Exception as exc:
        attempt.error = str(exc) or exc.__class__.__name__
        print(f"Error sending to {recipient}: {attempt.error}", file=sys.stderr)
    return attempt
