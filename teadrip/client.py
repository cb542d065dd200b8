from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware


NATIVE_TRANSFER_GAS = 21_000


class TransferFailed(RuntimeError):
    pass


@dataclass
class ChainClient:
    w3: Web3
    account: LocalAccount
    confirm_timeout: float = 300
    poll_latency: float = 5

    @staticmethod
    def connect(rpc_url: str, private_key: str, confirm_timeout: float = 300) -> "ChainClient":
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 60}))
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        account = Account.from_key(private_key)
        return ChainClient(w3=w3, account=account, confirm_timeout=confirm_timeout)

    @property
    def address(self) -> str:
        return self.account.address

    def get_balance(self) -> int:
        return self.w3.eth.get_balance(self.address)

    @staticmethod
    def format_balance(wei: int) -> Decimal:
        return Web3.from_wei(wei, "ether")

    def _fee_fields(self) -> dict:
        latest = self.w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas") or Web3.to_wei("5", "gwei")
        try:
            priority = self.w3.eth.max_priority_fee
        except Exception:
            priority = Web3.to_wei("2", "gwei")
        return {
            "maxFeePerGas": int(base_fee * 2 + priority),
            "maxPriorityFeePerGas": int(priority),
        }

    def send_value(self, to: str, value_wei: int) -> str:
        """Sign and broadcast a plain value transfer; returns the 0x tx hash."""
        tx = {
            "to": to,
            "from": self.address,
            "value": int(value_wei),
            "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
            "gas": NATIVE_TRANSFER_GAS,
            "chainId": self.w3.eth.chain_id,
            **self._fee_fields(),
        }
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    def wait_for_confirmation(self, tx_hash: str) -> int:
        """Block until the transfer is mined; returns its block number."""
        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.confirm_timeout, poll_latency=self.poll_latency
        )
        if receipt["status"] != 1:
            raise TransferFailed(f"transaction {tx_hash} reverted in block {receipt['blockNumber']}")
        return receipt["blockNumber"]
