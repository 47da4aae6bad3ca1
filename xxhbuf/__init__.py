"""xxhbuf: buffered streaming XXH3 hashing with keyed entropy pools.

Small inputs are hashed one-shot from a fixed buffer; streaming state is only built once
the buffer would overflow. Digests are identical either way.
"""

from .errors import InvalidSecretLength
from .canonical import canonical_from_hash, hash_from_canonical
from .primitive import DEFAULT_SECRET, MIN_SECRET_SIZE, POOL_SIZE, XXH3_64, XXH3_128, XXH64, HashPrimitive
from .entropy import EntropyPool
from .buffered import BUFFER_CAPACITY, Buffered64, Buffered128, BufferedHasher, BufferedXXH64
from .oneshot import hash, hash_with_seed, hash_with_secret, verify_chunks  # noqa: A004
from .buildhash import RandomState, RandomState64, RandomState128, RandomStateXXH64

__all__ = [
    "InvalidSecretLength",
    "canonical_from_hash",
    "hash_from_canonical",
    "DEFAULT_SECRET",
    "MIN_SECRET_SIZE",
    "POOL_SIZE",
    "BUFFER_CAPACITY",
    "HashPrimitive",
    "XXH3_64",
    "XXH3_128",
    "XXH64",
    "EntropyPool",
    "BufferedHasher",
    "Buffered64",
    "Buffered128",
    "BufferedXXH64",
    "hash",
    "hash_with_seed",
    "hash_with_secret",
    "verify_chunks",
    "RandomState",
    "RandomState64",
    "RandomState128",
    "RandomStateXXH64",
]
