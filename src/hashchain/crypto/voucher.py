"""Off-chain vouchers authorizing a channel redemption.

The packing mirrors Solidity ``abi.encodePacked(address, address, address,
address, uint256, uint256, uint64)`` and the signature uses the EIP-191
personal-message prefix, so the contract can recover the signer with
``ECDSA.recover(toEthSignedMessageHash(keccak256(packed)), sig)``.
"""

from __future__ import annotations

from typing import Final

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import keccak, to_checksum_address

VOUCHER_TYPES: Final[tuple[str, ...]] = (
    "address",  # contract
    "address",  # payer
    "address",  # payee
    "address",  # token
    "uint256",  # amount
    "uint256",  # nonce
    "uint64",  # session id
)
VOUCHER_PACKED_SIZE: Final[int] = 20 * 4 + 32 * 2 + 8

_UINT256_MAX: Final[int] = 2**256 - 1
_UINT64_MAX: Final[int] = 2**64 - 1


def _check_uint(name: str, value: int, upper: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int")
    if value < 0 or value > upper:
        raise ValueError(f"{name} out of range")


def pack_voucher(
    contract_address: str,
    payer: str,
    payee: str,
    token: str,
    amount: int,
    nonce: int,
    session_id: int,
) -> bytes:
    """Return the 152-byte packed voucher fields."""
    _check_uint("amount", amount, _UINT256_MAX)
    _check_uint("nonce", nonce, _UINT256_MAX)
    _check_uint("session_id", session_id, _UINT64_MAX)
    values = [
        to_checksum_address(contract_address),
        to_checksum_address(payer),
        to_checksum_address(payee),
        to_checksum_address(token),
        amount,
        nonce,
        session_id,
    ]
    return encode_packed(list(VOUCHER_TYPES), values)


def voucher_digest(
    contract_address: str,
    payer: str,
    payee: str,
    token: str,
    amount: int,
    nonce: int,
    session_id: int,
) -> bytes:
    """Hash the packed voucher with keccak-256."""
    return keccak(
        pack_voucher(contract_address, payer, payee, token, amount, nonce, session_id)
    )


def sign_personal_message(
    signing_key: LocalAccount | str | bytes, message: bytes
) -> bytes:
    """EIP-191 personal-sign raw `message`; returns the 65-byte r||s||v."""
    account = (
        signing_key
        if isinstance(signing_key, LocalAccount)
        else Account.from_key(signing_key)
    )
    signed = account.sign_message(encode_defunct(primitive=message))
    return bytes(signed.signature)


def sign_voucher(
    signing_key: LocalAccount | str | bytes,
    contract_address: str,
    payer: str,
    payee: str,
    token: str,
    amount: int,
    nonce: int,
    session_id: int,
) -> bytes:
    """Sign the voucher digest as a personal message; returns the 65-byte r||s||v."""
    digest = voucher_digest(
        contract_address, payer, payee, token, amount, nonce, session_id
    )
    return sign_personal_message(signing_key, digest)


def recover_voucher_signer(
    signature: bytes | str,
    contract_address: str,
    payer: str,
    payee: str,
    token: str,
    amount: int,
    nonce: int,
    session_id: int,
) -> str:
    """Recover the checksummed address that signed a voucher."""
    digest = voucher_digest(
        contract_address, payer, payee, token, amount, nonce, session_id
    )
    return Account.recover_message(encode_defunct(primitive=digest), signature=signature)
