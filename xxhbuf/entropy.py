from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from Crypto.Hash import SHAKE128
from Crypto.Random import get_random_bytes

from .canonical import MASK64, canonical_from_hash, hash_from_canonical, split128
from .errors import InvalidSecretLength
from .primitive import DEFAULT_SECRET, POOL_SIZE, XXH3_128, BytesLike

# Secrets are processed as little-endian (low64, high64) lane pairs, 16 bytes per segment.
_LANES = np.dtype("<u8")


def _segments(buf: bytes) -> np.ndarray:
    return np.frombuffer(buf, dtype=_LANES).reshape(-1, 2).copy()


def init_custom_secret(seed: int) -> bytes:
    """
    XXH3_initCustomSecret: derive a pool from the default secret and a 64-bit seed.

    Each segment's low lane gets `+seed`, its high lane `-seed` (mod 2**64). Seed 0 yields
    DEFAULT_SECRET unchanged.
    """
    seg = _segments(DEFAULT_SECRET)
    s = np.uint64(seed & MASK64)
    seg[:, 0] += s
    seg[:, 1] -= s
    return seg.astype(_LANES).tobytes()


def generate_secret(key: BytesLike) -> bytes:
    """
    XXH3_generateSecret: stretch a key of any length into POOL_SIZE bytes.

    The key is tiled over the pool, then every segment n is XORed with
    XXH3_128(scrambler, seed=n) where the scrambler is the canonical XXH3_128 of the key;
    the last segment is finally XORed with the scrambler itself.
    """
    key = bytes(key)
    if not key:
        return DEFAULT_SECRET

    reps = -(-POOL_SIZE // len(key))
    seg = _segments((key * reps)[:POOL_SIZE])

    scrambler = canonical_from_hash(XXH3_128.hash(key), 128)
    mix = np.array(
        [split128(XXH3_128.hash_with_seed(n, scrambler)) for n in range(len(seg))],
        dtype=np.uint64,
    )
    seg ^= mix
    seg[-1] ^= np.array(split128(hash_from_canonical(scrambler)), dtype=np.uint64)
    return seg.astype(_LANES).tobytes()


@dataclass(frozen=True, repr=False)
class EntropyPool:
    """
    Fixed-size secret material for the keyed (`withSecret`) hashing modes.

    These modes have not been verified as message authentication codes; they are harder
    to reverse than seeds, nothing more. Pools are immutable and may be shared freely.

    Derivations, fastest first:
      - `randomize()`     fresh CSPRNG bytes (enough for hash-flooding resistance)
      - `with_seed(s)`    expand a 64-bit seed with the primitive's custom-secret routine
      - `with_key(k)`     the primitive's own key stretching
      - `with_key_xof(k)` SHAKE128 squeezed to POOL_SIZE; use this when an attacker may try
                          to recover the secret from observed digests
    """

    entropy: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.entropy)
        if len(raw) != POOL_SIZE:
            raise InvalidSecretLength(len(raw), POOL_SIZE, exact=True)
        object.__setattr__(self, "entropy", raw)

    @classmethod
    def randomize(cls) -> "EntropyPool":
        return cls(get_random_bytes(POOL_SIZE))

    @classmethod
    def with_seed(cls, seed: int) -> "EntropyPool":
        return cls(init_custom_secret(seed))

    @classmethod
    def with_key(cls, key: BytesLike) -> "EntropyPool":
        return cls(generate_secret(key))

    @classmethod
    def with_key_xof(cls, key: BytesLike) -> "EntropyPool":
        return cls(SHAKE128.new(data=bytes(key)).read(POOL_SIZE))

    def copy(self) -> "EntropyPool":
        return EntropyPool(bytes(self.entropy))

    def __bytes__(self) -> bytes:
        return self.entropy

    def __len__(self) -> int:
        return len(self.entropy)

    def __repr__(self) -> str:
        return "EntropyPool(entropy=[" + ", ".join(str(b) for b in self.entropy) + "])"
