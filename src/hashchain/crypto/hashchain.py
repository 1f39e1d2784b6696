from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Optional, Sequence, Union

from eth_utils import keccak
from hexbytes import HexBytes

from ..domain.errors import InvalidLengthError

DIGEST_SIZE: Final[int] = 32
SEED_SIZE: Final[int] = 32
MAX_HASH_CHAIN_LENGTH: Final[int] = 2**24

Seed = Union[bytes, str]
Digest = Union[bytes, str]


def to_digest(value: Digest) -> bytes:
    """Coerce a 32-byte digest given as bytes or 0x-prefixed hex."""
    raw = bytes(HexBytes(value))
    if len(raw) != DIGEST_SIZE:
        raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(raw)}")
    return raw


def keccak_n(data: bytes, n: int) -> bytes:
    """Apply keccak-256 n times (n >= 0)."""
    if n < 0:
        raise ValueError("n must be >= 0")
    out = data
    for _ in range(n):
        out = keccak(out)
    return out


def _seed_bytes(seed: Optional[Seed]) -> bytes:
    if seed is None:
        return os.urandom(SEED_SIZE)
    if isinstance(seed, str):
        return seed.encode("utf-8")
    return bytes(seed)


def _check_length(length: int) -> None:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidLengthError(f"hash chain length must be an int, got {length!r}")
    if length < 0:
        raise InvalidLengthError("hash chain length must be >= 0")
    if length > MAX_HASH_CHAIN_LENGTH:
        raise InvalidLengthError(
            f"hash chain length {length} exceeds maximum of {MAX_HASH_CHAIN_LENGTH}"
        )


def generate_hash_chain(seed: Optional[Seed], length: int) -> tuple[bytes, ...]:
    """
    Build a keccak-256 hash chain (h0, h1, ..., hN) where:
      h0 = keccak(seed)
      hi = keccak(h(i-1)) for i in 1..N

    A ``str`` seed is UTF-8 encoded. Without a seed, 32 random bytes are used,
    so the chain cannot be reproduced later.

    Returns a tuple of length (N + 1).
    """
    _check_length(length)
    cur = _seed_bytes(seed)
    chain: list[bytes] = []
    for _ in range(length + 1):
        cur = keccak(cur)
        chain.append(cur)
    return tuple(chain)


def trust_anchor(chain: Sequence[bytes]) -> bytes:
    """Return the terminal digest committed on-chain."""
    if not chain:
        raise ValueError("hash chain is empty")
    return chain[-1]


def verify_token(
    trust_anchor: Digest,
    disclosed_digest: Digest,
    hashes_remaining: int,
) -> bool:
    """Verify that keccak^hashes_remaining(disclosed_digest) == trust_anchor."""
    if hashes_remaining < 0:
        raise ValueError("hashes_remaining must be >= 0")
    anchor = to_digest(trust_anchor)
    token = to_digest(disclosed_digest)
    return keccak_n(token, hashes_remaining) == anchor


@dataclass(frozen=True)
class HashChain:
    """
    Payer-side view of a generated chain.

    Tokens are disclosed from the anchor backwards: after ``u`` paid tokens the
    payer reveals ``h[N - u]``, which reaches the anchor in exactly ``u`` hashes.
    That is the arithmetic the ledger applies to ``numberOfTokensUsed``.
    """

    digests: tuple[bytes, ...]

    @staticmethod
    def create(*, length: int, seed: Optional[Seed] = None) -> "HashChain":
        return HashChain(digests=generate_hash_chain(seed, length))

    @property
    def length(self) -> int:
        return len(self.digests) - 1

    @property
    def trust_anchor(self) -> bytes:
        return trust_anchor(self.digests)

    def token_at(self, tokens_used: int) -> bytes:
        if tokens_used < 0 or tokens_used > self.length:
            raise ValueError("tokens_used out of bounds")
        return self.digests[self.length - tokens_used]

    def hex_digests(self) -> list[str]:
        return ["0x" + d.hex() for d in self.digests]
