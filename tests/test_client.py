from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from teadrip.client import NATIVE_TRANSFER_GAS, ChainClient, TransferFailed

from conftest import ADDR_1, TEST_KEY, TEST_WALLET


GWEI = 10**9


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.get_block.return_value = {"baseFeePerGas": 10 * GWEI}
    w3.eth.max_priority_fee = 2 * GWEI
    w3.eth.chain_id = 10218
    w3.eth.send_raw_transaction.return_value = HexBytes("0x" + "ab" * 32)
    return w3


@pytest.fixture
def client(w3):
    return ChainClient(w3=w3, account=Account.from_key(TEST_KEY), confirm_timeout=30, poll_latency=1)


def test_connect_derives_wallet():
    client = ChainClient.connect("http://127.0.0.1:8545", TEST_KEY, confirm_timeout=42)
    assert client.address == TEST_WALLET
    assert client.confirm_timeout == 42


def test_connect_rejects_bad_key():
    with pytest.raises(ValueError):
        ChainClient.connect("http://127.0.0.1:8545", "0x1234")


def test_balance(client, w3):
    w3.eth.get_balance.return_value = 1234 * 10**15
    assert client.get_balance() == 1234 * 10**15
    w3.eth.get_balance.assert_called_once_with(TEST_WALLET)
    assert client.format_balance(1234 * 10**15) == Decimal("1.234")


def test_send_value_signs_and_broadcasts(client, w3):
    to = Web3.to_checksum_address(ADDR_1)
    tx_hash = client.send_value(to, 10**15)

    assert tx_hash == "0x" + "ab" * 32
    w3.eth.get_transaction_count.assert_called_once_with(TEST_WALLET, "pending")
    raw = w3.eth.send_raw_transaction.call_args.args[0]
    assert Account.recover_transaction(raw) == TEST_WALLET


def test_send_value_fee_fields(client):
    fees = client._fee_fields()
    assert fees == {"maxFeePerGas": 22 * GWEI, "maxPriorityFeePerGas": 2 * GWEI}


class _NoFeeEth:
    chain_id = 1

    def get_block(self, ident):
        return {}

    @property
    def max_priority_fee(self):
        raise ValueError("method not supported")


class _NoFeeWeb3:
    eth = _NoFeeEth()


def test_fee_fallbacks():
    client = ChainClient(w3=_NoFeeWeb3(), account=Account.from_key(TEST_KEY))
    assert client._fee_fields() == {"maxFeePerGas": 12 * GWEI, "maxPriorityFeePerGas": 2 * GWEI}


def test_transfer_gas_is_fixed():
    assert NATIVE_TRANSFER_GAS == 21_000


def test_wait_for_confirmation(client, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 4242}
    assert client.wait_for_confirmation("0xabc") == 4242
    w3.eth.wait_for_transaction_receipt.assert_called_once_with("0xabc", timeout=30, poll_latency=1)


def test_wait_for_confirmation_reverted(client, w3):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 4243}
    with pytest.raises(TransferFailed, match="reverted in block 4243"):
        client.wait_for_confirmation("0xabc")


def test_wait_for_confirmation_timeout_propagates(client, w3):
    w3.eth.wait_for_transaction_receipt.side_effect = TimeoutError("not mined")
    with pytest.raises(TimeoutError):
        client.wait_for_confirmation("0xabc")
