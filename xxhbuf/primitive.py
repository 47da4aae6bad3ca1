from __future__ import annotations

from typing import Any, Optional, Protocol, Union

import xxhash

from .canonical import MASK64
from .errors import InvalidSecretLength

# XXH3 sizes (XXH3_SECRET_DEFAULT_SIZE / XXH3_SECRET_SIZE_MIN in xxhash.h).
POOL_SIZE = 192
MIN_SECRET_SIZE = 136

BytesLike = Union[bytes, bytearray, memoryview]

# The Python binding keeps the reference kSecret private, so the default pool is
# derived from the primitive itself: twelve canonical XXH3-128 blocks of a fixed label.
DEFAULT_SECRET = b"".join(
    xxhash.xxh3_128_digest(b"xxhbuf.default-secret", seed=n) for n in range(POOL_SIZE // 16)
)


class HashPrimitive(Protocol):
    """
    Capability set of a hash primitive usable behind `BufferedHasher`.

    One-shot entry points are classmethods and operate on a complete input. Streaming
    instances are created by `new` / `with_seed` / `with_secret` / `with_secret_copy`,
    mutated by `write` and read by `finish`, which MUST NOT mutate state and may be
    called any number of times (including before the first write).
    """

    digest_bits: int

    @classmethod
    def hash(cls, data: BytesLike) -> int: ...

    @classmethod
    def hash_with_seed(cls, seed: int, data: BytesLike) -> int: ...

    @classmethod
    def hash_with_secret(cls, secret: Any, data: BytesLike) -> int: ...

    @classmethod
    def new(cls) -> "HashPrimitive": ...

    @classmethod
    def with_seed(cls, seed: int) -> "HashPrimitive": ...

    @classmethod
    def with_secret(cls, secret: BytesLike) -> "HashPrimitive": ...

    @classmethod
    def with_secret_copy(cls, secret: Any) -> "HashPrimitive": ...

    def write(self, data: BytesLike) -> None: ...

    def finish(self) -> int: ...

    def copy(self) -> "HashPrimitive": ...


def _as_buffer(secret: Any) -> Any:
    # EntropyPool and friends expose their bytes as `.entropy`.
    return getattr(secret, "entropy", secret)


def check_secret(secret: Any) -> memoryview:
    """
    Validate a secret buffer and return a zero-copy view on it.

    Raises `InvalidSecretLength` when it is shorter than MIN_SECRET_SIZE and
    `TypeError` when it is not bytes-like.
    """
    view = memoryview(_as_buffer(secret))
    if view.nbytes < MIN_SECRET_SIZE:
        raise InvalidSecretLength(view.nbytes, MIN_SECRET_SIZE)
    return view


def _secret_seed(secret: memoryview) -> int:
    # Separates secrets of different lengths whose bytes would otherwise concatenate alike.
    return secret.nbytes


class _XXHPrimitive:
    """
    Common body of the xxhash-backed primitives.

    xxhash exposes no withSecret entry point, so keyed modes absorb the whole secret as a
    prefix of the input (under a length seed) when the state is reset; one-shot and
    streaming keyed digests are therefore `hash(secret + data)` alike.
    """

    digest_bits: int = 0
    _state_type: Any = None
    _intdigest: Any = None

    __slots__ = ("_state", "_secret")

    def __init__(self, state: Any, secret: Optional[BytesLike] = None) -> None:
        self._state = state
        # Keeps whatever the state was derived from reachable for its whole lifetime.
        self._secret = secret

    # One-shot

    @classmethod
    def hash(cls, data: BytesLike) -> int:
        return cls._intdigest(data)

    @classmethod
    def hash_with_seed(cls, seed: int, data: BytesLike) -> int:
        return cls._intdigest(data, seed=seed & MASK64)

    @classmethod
    def hash_with_secret(cls, secret: Any, data: BytesLike) -> int:
        state = cls._keyed_state(check_secret(secret))
        state.update(data)
        return state.intdigest()

    # Streaming

    @classmethod
    def new(cls):
        return cls(cls._state_type())

    @classmethod
    def with_seed(cls, seed: int):
        return cls(cls._state_type(seed=seed & MASK64))

    @classmethod
    def with_secret(cls, secret: BytesLike):
        """Borrow `secret`: no copy is made, the caller must not mutate it afterwards."""
        view = check_secret(secret)
        return cls(cls._keyed_state(view), view)

    @classmethod
    def with_secret_copy(cls, secret: Any):
        """Copy `secret` (bytes-like or EntropyPool) into the instance."""
        owned = bytes(check_secret(secret))
        return cls(cls._keyed_state(memoryview(owned)), owned)

    @classmethod
    def _keyed_state(cls, secret: memoryview) -> Any:
        state = cls._state_type(seed=_secret_seed(secret))
        state.update(secret)
        return state

    def write(self, data: BytesLike) -> None:
        self._state.update(data)

    def finish(self) -> int:
        return self._state.intdigest()

    def copy(self):
        return type(self)(self._state.copy(), self._secret)

    def __repr__(self) -> str:
        keyed = "secret" if self._secret is not None else "plain"
        return f"<{type(self).__name__} {keyed}>"


class XXH3_64(_XXHPrimitive):
    """XXH3 with a 64-bit digest."""

    __slots__ = ()

    digest_bits = 64
    _state_type = xxhash.xxh3_64
    _intdigest = staticmethod(xxhash.xxh3_64_intdigest)


class XXH3_128(_XXHPrimitive):
    """XXH3 with a 128-bit digest (`(high64 << 64) | low64`)."""

    __slots__ = ()

    digest_bits = 128
    _state_type = xxhash.xxh3_128
    _intdigest = staticmethod(xxhash.xxh3_128_intdigest)


class XXH64(_XXHPrimitive):
    """Classic XXH64; slower than XXH3 on short inputs but a stable, long-standing format."""

    __slots__ = ()

    digest_bits = 64
    _state_type = xxhash.xxh64
    _intdigest = staticmethod(xxhash.xxh64_intdigest)
