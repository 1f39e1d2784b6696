"""Map opaque ledger failures to the contract's named custom errors.

Revert data can sit at different depths depending on which layer wrapped it
(web3 exceptions, raw JSON-RPC error objects, ethers-style nested ``error``
chains). Extraction is an ordered list of pure strategies; the first one that
yields a payload wins.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Final, Iterable, Optional

from eth_abi import decode as abi_decode
from eth_utils.abi import collapse_if_tuple, function_signature_to_4byte_selector
from hexbytes import HexBytes

from ...domain.channel.entities import ContractErrorInfo
from ...domain.errors import InvalidErrorDataError, SelectorNotFoundError

logger = logging.getLogger(__name__)

SELECTOR_SIZE: Final[int] = 4

PayloadStrategy = Callable[[Any], Optional[bytes]]


def _as_payload(value: Any) -> Optional[bytes]:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and value.startswith("0x"):
        try:
            return bytes(HexBytes(value))
        except ValueError:
            return None
    return None


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _at_path(*keys: str) -> PayloadStrategy:
    def strategy(raw_error: Any) -> Optional[bytes]:
        cur = raw_error
        for key in keys:
            cur = _get(cur, key)
            if cur is None:
                return None
        return _as_payload(cur)

    strategy.__name__ = "at_" + "_".join(keys)
    return strategy


def _from_rpc_response(raw_error: Any) -> Optional[bytes]:
    rpc_response = getattr(raw_error, "rpc_response", None)
    if not isinstance(rpc_response, Mapping):
        return None
    return _at_path("error", "data")(rpc_response)


def _from_args(raw_error: Any) -> Optional[bytes]:
    for arg in getattr(raw_error, "args", ()):
        payload = _as_payload(arg)
        if payload is None and isinstance(arg, Mapping):
            payload = _as_payload(arg.get("data"))
        if payload is not None:
            return payload
    return None


def _from_raw_value(raw_error: Any) -> Optional[bytes]:
    return _as_payload(raw_error)


PAYLOAD_STRATEGIES: Final[tuple[PayloadStrategy, ...]] = (
    _at_path("data"),
    _from_rpc_response,
    _at_path("error", "error", "error", "data"),
    _at_path("error", "error", "data"),
    _at_path("error", "data"),
    _from_args,
    _from_raw_value,
)


def extract_error_payload(
    raw_error: Any,
    strategies: Iterable[PayloadStrategy] = PAYLOAD_STRATEGIES,
) -> bytes:
    """Return the revert payload found by the first successful strategy.

    Raises:
        InvalidErrorDataError: If no payload is found or it is shorter than a selector.
    """
    for strategy in strategies:
        payload = strategy(raw_error)
        if payload is not None:
            break
    else:
        raise InvalidErrorDataError("Invalid error data: no revert payload found")
    if len(payload) < SELECTOR_SIZE:
        raise InvalidErrorDataError(
            f"Invalid error data: payload has {len(payload)} bytes"
        )
    return payload


def error_signature(fragment: Mapping[str, Any]) -> str:
    """Canonical signature, e.g. ``IncorrectAmount(uint256,uint256)``."""
    types = ",".join(collapse_if_tuple(dict(i)) for i in fragment.get("inputs", []))
    return f"{fragment['name']}({types})"


def build_selector_table(
    abi: Iterable[Mapping[str, Any]],
) -> dict[bytes, Mapping[str, Any]]:
    """Map each custom error's 4-byte selector to its ABI fragment."""
    table: dict[bytes, Mapping[str, Any]] = {}
    for fragment in abi:
        if not isinstance(fragment, Mapping) or fragment.get("type") != "error":
            continue
        try:
            signature = error_signature(fragment)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed ABI error entry %r: %s", fragment, e)
            continue
        table[bytes(function_signature_to_4byte_selector(signature))] = fragment
    return table


def _decode_arguments(fragment: Mapping[str, Any], payload: bytes) -> tuple[Any, ...]:
    types = [collapse_if_tuple(dict(i)) for i in fragment.get("inputs", [])]
    return tuple(abi_decode(types, payload[SELECTOR_SIZE:]))


def match_contract_error(
    raw_error: Any, abi: Iterable[Mapping[str, Any]]
) -> ContractErrorInfo:
    """Strict variant of `decode_contract_error`.

    Raises:
        InvalidErrorDataError: No usable payload.
        SelectorNotFoundError: The selector is not one of the ABI's errors.
    """
    payload = extract_error_payload(raw_error)
    selector = payload[:SELECTOR_SIZE]
    fragment = build_selector_table(abi).get(selector)
    if fragment is None:
        raise SelectorNotFoundError(selector)

    error_name = str(fragment["name"])
    logger.info("Matched contract error %s (0x%s)", error_name, selector.hex())

    # Arguments are informational only; a malformed tail must not fail the match.
    try:
        decoded_args = _decode_arguments(fragment, payload)
        logger.debug("Decoded %s arguments: %r", error_name, decoded_args)
    except Exception as e:
        logger.warning(
            "Decoding %s arguments failed, proceeding with basic error info: %s",
            error_name,
            e,
        )

    return ContractErrorInfo(selector=selector, error_name=error_name)


def decode_contract_error(
    raw_error: Any, abi: Iterable[Mapping[str, Any]]
) -> Optional[ContractErrorInfo]:
    """Decode a ledger failure into ``{selector, error_name}``, or None if impossible."""
    try:
        return match_contract_error(raw_error, abi)
    except (InvalidErrorDataError, SelectorNotFoundError) as e:
        logger.warning("Error decoding failed: %s", e)
        return None
