from __future__ import annotations

from typing import List, Optional, Tuple

import pytest
from eth_account import Account
from web3 import Web3

from teadrip.config import ENV_KEYS, Config


# Throwaway key published in library documentation; never funded.
TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_WALLET = Account.from_key(TEST_KEY).address

ADDR_1 = "0x" + "ab" * 20
ADDR_2 = "0x" + "cd" * 20
ADDR_3 = "0x" + "ef" * 20


class FakeClient:
    """Stands in for ChainClient and records what was asked of it."""

    address = TEST_WALLET

    def __init__(self, balance: int = 5 * 10**18, fail_on=(), balance_error: Optional[Exception] = None):
        self.balance = balance
        self.fail_on = {a.lower() for a in fail_on}
        self.balance_error = balance_error
        self.balance_calls = 0
        self.sent: List[Tuple[str, int]] = []
        self.confirmed: List[str] = []

    def get_balance(self) -> int:
        self.balance_calls += 1
        if self.balance_error is not None:
            raise self.balance_error
        return self.balance

    @staticmethod
    def format_balance(wei: int):
        return Web3.from_wei(wei, "ether")

    def send_value(self, to: str, value_wei: int) -> str:
        if to.lower() in self.fail_on:
            raise ConnectionError("connection refused")
        self.sent.append((to, value_wei))
        return "0x" + f"{len(self.sent):064x}"

    def wait_for_confirmation(self, tx_hash: str) -> int:
        self.confirmed.append(tx_hash)
        return 1000 + len(self.confirmed)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def config() -> Config:
    return Config(PRIVATE_KEY=TEST_KEY)


@pytest.fixture
def address_file(tmp_path):
    path = tmp_path / "address.txt"
    path.write_text(f"{ADDR_1}\n{ADDR_2}\n", encoding="utf-8")
    return path
