from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Type, Union

from .canonical import MASK64, canonical_from_hash
from .entropy import EntropyPool
from .primitive import XXH3_64, XXH3_128, XXH64, BytesLike, HashPrimitive, check_secret

logger = logging.getLogger(__name__)

# Bytes accumulated before streaming state is built. Below this, one-shot hashing of the
# whole input beats paying the streaming setup.
BUFFER_CAPACITY = 512


# Pending initialization modes (kept while Buffered).


@dataclass(frozen=True)
class Default:
    pass


@dataclass(frozen=True)
class Seeded:
    seed: int


@dataclass(frozen=True)
class SecretRef:
    secret: memoryview


@dataclass(frozen=True)
class SecretShared:
    pool: EntropyPool


@dataclass(frozen=True)
class SecretOwned:
    pool: EntropyPool


Mode = Union[Default, Seeded, SecretRef, SecretShared, SecretOwned]


# Secret ownership retained while Streaming. Seed/default modes retain nothing (None).


@dataclass(frozen=True)
class Borrowed:
    secret: memoryview


@dataclass(frozen=True)
class Shared:
    pool: EntropyPool


@dataclass(frozen=True)
class Owned:
    pool: EntropyPool


Ownership = Optional[Union[Borrowed, Shared, Owned]]


@dataclass
class Buffered:
    mode: Mode
    buf: bytearray = field(default_factory=bytearray)


@dataclass
class Streaming:
    hasher: HashPrimitive
    ownership: Ownership = None


State = Union[Buffered, Streaming]


def _check_pool(pool: EntropyPool) -> None:
    if not isinstance(pool, EntropyPool):
        raise TypeError(f"expected an EntropyPool, got {type(pool).__name__}")
    check_secret(pool)


def _ownership(mode: Mode) -> Ownership:
    if isinstance(mode, SecretRef):
        return Borrowed(mode.secret)
    if isinstance(mode, SecretShared):
        return Shared(mode.pool)
    if isinstance(mode, SecretOwned):
        return Owned(mode.pool)
    return None


class BufferedHasher:
    """
    Streaming hasher that defers the primitive's streaming state until it is needed.

    Writes are appended to a fixed-capacity buffer. As long as the total input fits,
    `finish()` is a single one-shot call over the buffer. The first write that would
    overflow the buffer promotes the hasher (once, irreversibly): a streaming instance is
    built from the pending mode, fed the buffered prefix and the new bytes, and used for
    everything afterwards.

    The digest is always the one-shot digest of the concatenated input under the same
    mode, however the input was chunked and whether or not promotion happened.

    Secret ownership:
      - `with_secret(buf)`         borrowed; `buf` must stay unmodified while the hasher lives
      - `with_secret_shared(pool)` shared; many hashers reference one immutable pool
      - `with_secret_copy(pool)`   owned; the hasher works on its own copy of the pool

    Instances are not thread-safe: one writer at a time, and no `finish()` concurrently
    with `write()`.
    """

    primitive: ClassVar[Type[HashPrimitive]] = XXH3_64

    __slots__ = ("_state", "_capacity")

    def __init__(self, mode: Optional[Mode] = None, *, capacity: int = BUFFER_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._state: State = Buffered(Default() if mode is None else mode)

    # Constructors

    @classmethod
    def new(cls, *, capacity: int = BUFFER_CAPACITY):
        return cls(Default(), capacity=capacity)

    @classmethod
    def with_seed(cls, seed: int, *, capacity: int = BUFFER_CAPACITY):
        return cls(Seeded(seed & MASK64), capacity=capacity)

    @classmethod
    def with_secret(cls, secret: BytesLike, *, capacity: int = BUFFER_CAPACITY):
        return cls(SecretRef(check_secret(secret)), capacity=capacity)

    @classmethod
    def with_secret_shared(cls, pool: EntropyPool, *, capacity: int = BUFFER_CAPACITY):
        _check_pool(pool)
        return cls(SecretShared(pool), capacity=capacity)

    @classmethod
    def with_secret_copy(cls, pool: EntropyPool, *, capacity: int = BUFFER_CAPACITY):
        _check_pool(pool)
        return cls(SecretOwned(pool.copy()), capacity=capacity)

    # Hashing

    def write(self, data: BytesLike) -> None:
        view = memoryview(data)
        st = self._state
        if isinstance(st, Streaming):
            st.hasher.write(view)
            return

        if len(st.buf) + view.nbytes <= self._capacity:
            st.buf += view
            return
        self._promote(st, view)

    update = write

    def finish(self) -> int:
        st = self._state
        if isinstance(st, Streaming):
            return st.hasher.finish()
        return self._oneshot(st.mode, st.buf)

    intdigest = finish

    def digest(self) -> bytes:
        return canonical_from_hash(self.finish(), self.digest_bits)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self):
        dup = object.__new__(type(self))
        dup._capacity = self._capacity
        st = self._state
        if isinstance(st, Streaming):
            dup._state = Streaming(st.hasher.copy(), st.ownership)
        else:
            dup._state = Buffered(st.mode, bytearray(st.buf))
        return dup

    __copy__ = copy

    # Introspection

    @property
    def digest_bits(self) -> int:
        return self.primitive.digest_bits

    @property
    def digest_size(self) -> int:
        return self.primitive.digest_bits // 8

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def promoted(self) -> bool:
        return isinstance(self._state, Streaming)

    @property
    def buffered_len(self) -> int:
        st = self._state
        return 0 if isinstance(st, Streaming) else len(st.buf)

    @property
    def ownership(self) -> Ownership:
        st = self._state
        return st.ownership if isinstance(st, Streaming) else _ownership(st.mode)

    def __repr__(self) -> str:
        st = self._state
        if isinstance(st, Streaming):
            return f"<{type(self).__name__} streaming>"
        return f"<{type(self).__name__} buffered {type(st.mode).__name__} {len(st.buf)}/{self._capacity}>"

    # Internals

    def _oneshot(self, mode: Mode, data: BytesLike) -> int:
        p = self.primitive
        if isinstance(mode, Default):
            return p.hash(data)
        if isinstance(mode, Seeded):
            return p.hash_with_seed(mode.seed, data)
        if isinstance(mode, SecretRef):
            return p.hash_with_secret(mode.secret, data)
        if isinstance(mode, (SecretShared, SecretOwned)):
            return p.hash_with_secret(mode.pool, data)
        raise TypeError(f"Unknown hasher mode: {mode!r}")

    def _start(self, mode: Mode) -> HashPrimitive:
        p = self.primitive
        if isinstance(mode, Default):
            return p.new()
        if isinstance(mode, Seeded):
            return p.with_seed(mode.seed)
        if isinstance(mode, SecretRef):
            return p.with_secret(mode.secret)
        if isinstance(mode, (SecretShared, SecretOwned)):
            return p.with_secret_copy(mode.pool)
        raise TypeError(f"Unknown hasher mode: {mode!r}")

    def _promote(self, st: Buffered, view: memoryview) -> None:
        logger.debug(
            "promoting %s (%s) to streaming: %d buffered + %d new bytes exceed capacity %d",
            type(self).__name__,
            type(st.mode).__name__,
            len(st.buf),
            view.nbytes,
            self._capacity,
        )
        hasher = self._start(st.mode)
        hasher.write(st.buf)
        hasher.write(view)
        self._state = Streaming(hasher, _ownership(st.mode))


class Buffered64(BufferedHasher):
    """BufferedHasher over XXH3_64."""

    __slots__ = ()

    primitive = XXH3_64


class Buffered128(BufferedHasher):
    """BufferedHasher over XXH3_128."""

    __slots__ = ()

    primitive = XXH3_128


class BufferedXXH64(BufferedHasher):
    """BufferedHasher over classic XXH64."""

    __slots__ = ()

    primitive = XXH64
