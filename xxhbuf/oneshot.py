from __future__ import annotations

from typing import Any, Iterable, Optional, Type, Union

from .buffered import Buffered64, BufferedHasher
from .primitive import XXH3_64, BytesLike, HashPrimitive

# Stateless forwarders for callers that already hold the whole input.

DEFAULT_PRIMITIVE: Type[HashPrimitive] = XXH3_64


def hash(data: BytesLike, *, primitive: Type[HashPrimitive] = DEFAULT_PRIMITIVE) -> int:  # noqa: A001
    return primitive.hash(data)


def hash_with_seed(seed: int, data: BytesLike, *, primitive: Type[HashPrimitive] = DEFAULT_PRIMITIVE) -> int:
    return primitive.hash_with_seed(seed, data)


def hash_with_secret(secret: Any, data: BytesLike, *, primitive: Type[HashPrimitive] = DEFAULT_PRIMITIVE) -> int:
    """`secret` may be any bytes-like of at least MIN_SECRET_SIZE bytes, or an EntropyPool."""
    return primitive.hash_with_secret(secret, data)


def verify_chunks(
    chunks: Iterable[BytesLike],
    expected: Union[int, str],
    *,
    hasher: Optional[BufferedHasher] = None,
) -> bool:
    """
    Stream `chunks` through a fresh copy of `hasher` (default: unseeded Buffered64) and
    compare against `expected`, given either as an integer digest or a canonical hex string.
    """
    h = Buffered64.new() if hasher is None else hasher.copy()
    for chunk in chunks:
        h.write(chunk)
    if isinstance(expected, str):
        return h.hexdigest() == expected.lower()
    return h.finish() == expected
