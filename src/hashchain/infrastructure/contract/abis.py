from __future__ import annotations

import json
from pathlib import Path
from typing import Any

ABI_DIR = Path(__file__).parent / "abis"

HASHCHAIN_PROTOCOL_ABI_FILE = "HashchainProtocol.abi.json"
ERC20_ABI_FILE = "ERC20.abi.json"

_ABI_CACHE: dict[str, list[dict[str, Any]]] = {}


def load_abi(name: str) -> list[dict[str, Any]]:
    """Load an ABI JSON file shipped with the package (cached)."""
    if name not in _ABI_CACHE:
        _ABI_CACHE[name] = json.loads((ABI_DIR / name).read_text())
    return _ABI_CACHE[name]


def hashchain_protocol_abi() -> list[dict[str, Any]]:
    return load_abi(HASHCHAIN_PROTOCOL_ABI_FILE)


def erc20_abi() -> list[dict[str, Any]]:
    return load_abi(ERC20_ABI_FILE)
