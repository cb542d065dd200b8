from __future__ import annotations

import random
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from teadrip.config import Config
from teadrip.sender import TransferAttempt, send_native


@dataclass
class RunReport:
    attempts: List[TransferAttempt] = field(default_factory=list)
    completed: bool = False
    error: Optional[str] = None

    @property
    def sent(self) -> int:
        return sum(1 for a in self.attempts if a.success)

    @property
    def failed(self) -> int:
        return len(self.attempts) - self.sent


def send_delay(rng=random) -> float:
    # whole milliseconds in [1000, 2999]
    return rng.randint(1000, 2999) / 1000


def run_disbursement(
    client,
    recipients: Sequence[str],
    config: Config,
    sleep: Callable[[float], None] = time.sleep,
    rng=random,
) -> RunReport:
    """One pass over every recipient.

    The wallet is looked up once at the start; if that fails the run is
    abandoned and reported, so the next scheduled run can start over.
    """
    symbol = config.token_symbol
    report = RunReport()
    print(f"Starting {symbol} token distribution")
    print(f"Using RPC URL: {config.rpc_url}")
    try:
        address = client.address
        balance = client.format_balance(client.get_balance())
        print(f"Wallet address: {address}")
        print(f"Wallet balance: {balance} {symbol}")

        for recipient in recipients:
            report.attempts.append(
                send_native(client, recipient, config.min_amount, config.max_amount, symbol, rng=rng)
            )
            sleep(send_delay(rng))

        report.completed = True
        print("All transactions completed")
        print({"sent": report.sent, "failed": report.failed})
    except Exception as exc:
        report.error = str(exc) or exc.__class__.__name__
        print(f"Error in main process: {report.error}", file=sys.stderr)
    return report
