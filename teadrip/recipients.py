from __future__ import annotations

from pathlib import Path
from typing import List, Union

from web3 import Web3


class RecipientFileError(RuntimeError):
    pass


def load_recipients(path: Union[str, Path]) -> List[str]:
    """Read one address per line, in file order.

    Lines are trimmed and blank lines dropped; duplicates are kept.
    """
    path = Path(path)
    if not path.exists():
        raise RecipientFileError(f"{path.name} not found!")
    with open(path, "r", encoding="utf-8-sig") as f:
        recipients = [line.strip() for line in f]
    recipients = [r for r in recipients if r]
    if not recipients:
        raise RecipientFileError(f"No addresses found in {path.name}")
    return recipients


def normalize_address(address: str) -> str:
    return Web3.to_checksum_address(address.strip())
