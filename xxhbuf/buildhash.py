from __future__ import annotations

import logging
from typing import ClassVar, Optional, Type

from .buffered import Buffered64, Buffered128, BufferedHasher, BufferedXXH64
from .entropy import EntropyPool
from .primitive import BytesLike

logger = logging.getLogger(__name__)


class RandomState:
    """
    Hasher factory keyed with one entropy pool, e.g. for a hash table.

    Every hasher it builds is a clone of a single prototype created with
    `with_secret_shared`, so all of them reference the same pool without copying it.
    """

    hasher_type: ClassVar[Type[BufferedHasher]] = Buffered64

    __slots__ = ("proto",)

    def __init__(self, pool: Optional[EntropyPool] = None) -> None:
        if pool is None:
            pool = EntropyPool.randomize()
        self.proto = self.hasher_type.with_secret_shared(pool)
        logger.debug("built %s prototype %r", type(self).__name__, self.proto)

    @classmethod
    def with_pool(cls, pool: EntropyPool) -> "RandomState":
        return cls(pool)

    def build_hasher(self) -> BufferedHasher:
        return self.proto.copy()

    def hash_one(self, data: BytesLike) -> int:
        h = self.build_hasher()
        h.write(data)
        return h.finish()


class RandomState64(RandomState):
    __slots__ = ()

    hasher_type = Buffered64


class RandomState128(RandomState):
    __slots__ = ()

    hasher_type = Buffered128


class RandomStateXXH64(RandomState):
    __slots__ = ()

    hasher_type = BufferedXXH64
