import logging

import numpy as np
import pytest

from xxhbuf.buffered import (
    BUFFER_CAPACITY,
    Borrowed,
    Buffered64,
    Buffered128,
    BufferedHasher,
    BufferedXXH64,
    Owned,
    Shared,
)
from xxhbuf.entropy import EntropyPool
from xxhbuf.errors import InvalidSecretLength
from xxhbuf.primitive import MIN_SECRET_SIZE, XXH3_64, XXH3_128, XXH64

POOL = EntropyPool.with_key(b"buffered-tests")


def _modes(secret):
    # (constructor, one-shot reference) pairs for every initialization mode
    return [
        (lambda cls: cls.new(), lambda p, d: p.hash(d)),
        (lambda cls: cls.with_seed(0xDEADBEEF), lambda p, d: p.hash_with_seed(0xDEADBEEF, d)),
        (lambda cls: cls.with_secret(secret), lambda p, d: p.hash_with_secret(secret, d)),
        (lambda cls: cls.with_secret_shared(POOL), lambda p, d: p.hash_with_secret(POOL, d)),
        (lambda cls: cls.with_secret_copy(POOL), lambda p, d: p.hash_with_secret(POOL, d)),
    ]


@pytest.mark.parametrize("cls", [Buffered64, Buffered128, BufferedXXH64])
def test_chunking_invariance(cls, data, secret):
    rng = np.random.default_rng(3)
    for make, ref in _modes(secret):
        for total in (0, 1, 100, 511, 512, 513, 1500, 2048):
            d = data[:total]
            cuts = sorted(rng.integers(0, total + 1, size=4).tolist()) if total else []
            bounds = [0] + cuts + [total]
            h = make(cls)
            for a, b in zip(bounds, bounds[1:]):
                h.write(d[a:b])
            assert h.finish() == ref(cls.primitive, d)


def test_split_256_257_equals_oneshot(data):
    d = data[:513]
    h = Buffered64.new()
    h.write(d[:256])
    assert not h.promoted
    h.write(d[256:])
    assert h.promoted
    assert h.finish() == XXH3_64.hash(d)


@pytest.mark.parametrize("cls", [Buffered64, Buffered128])
def test_promotion_boundary(cls, data):
    h = cls.with_seed(1)
    h.write(data[:BUFFER_CAPACITY])
    assert not h.promoted
    assert h.buffered_len == BUFFER_CAPACITY
    assert h.finish() == cls.primitive.hash_with_seed(1, data[:BUFFER_CAPACITY])

    h.write(data[BUFFER_CAPACITY : BUFFER_CAPACITY + 1])
    assert h.promoted
    assert h.buffered_len == 0
    assert h.finish() == cls.primitive.hash_with_seed(1, data[: BUFFER_CAPACITY + 1])

    h.write(data[BUFFER_CAPACITY + 1 :])
    assert h.promoted
    assert h.finish() == cls.primitive.hash_with_seed(1, data)


def test_single_large_write_promotes(data):
    h = Buffered128.new()
    h.write(data)
    assert h.promoted
    assert h.finish() == XXH3_128.hash(data)


def test_finish_is_idempotent_and_works_without_writes(secret):
    assert Buffered64.new().finish() == XXH3_64.hash(b"")
    assert Buffered128.with_seed(5).finish() == XXH3_128.hash_with_seed(5, b"")
    assert Buffered64.with_secret(secret).finish() == XXH3_64.hash_with_secret(secret, b"")

    h = Buffered64.new()
    h.write(b"abc")
    assert h.finish() == h.finish()
    assert h.buffered_len == 3


def test_finish_after_promotion_is_idempotent(data):
    h = Buffered64.new()
    h.write(data)
    first = h.finish()
    assert h.finish() == first
    assert h.intdigest() == first


@pytest.mark.parametrize("cls", [Buffered64, Buffered128])
@pytest.mark.parametrize("mode", range(5))
@pytest.mark.parametrize("split", [10, 600])
def test_clone_divergence(cls, mode, split, data, secret):
    make, ref = _modes(secret)[mode]
    prefix = data[:split]
    h = make(cls)
    h.write(prefix)
    c = h.copy()
    assert c.promoted == h.promoted == (split > BUFFER_CAPACITY)
    h.write(b"original-suffix")
    c.write(data[split:])
    assert h.finish() == ref(cls.primitive, prefix + b"original-suffix")
    assert c.finish() == ref(cls.primitive, data)


def test_clone_shares_pool_without_copy(data):
    h = Buffered64.with_secret_shared(POOL)
    h.write(data)
    c = h.copy()
    assert isinstance(c.ownership, Shared)
    assert c.ownership.pool is POOL
    assert h.ownership.pool is POOL


def test_ownership_policies(secret, data):
    h = Buffered64.with_secret(secret)
    assert isinstance(h.ownership, Borrowed)
    h.write(data)
    assert isinstance(h.ownership, Borrowed)

    h = Buffered64.with_secret_copy(POOL)
    assert isinstance(h.ownership, Owned)
    assert h.ownership.pool == POOL
    assert h.ownership.pool is not POOL
    h.write(data)
    assert isinstance(h.ownership, Owned)
    assert isinstance(h.copy().ownership, Owned)
    assert h.finish() == XXH3_64.hash_with_secret(POOL, data)

    assert isinstance(Buffered64.with_secret_shared(POOL).ownership, Shared)

    assert Buffered64.with_seed(1).ownership is None


def test_borrowed_secret_pins_caller_buffer(data):
    buf = bytearray(b"\x07" * 192)
    h = Buffered64.with_secret(buf)
    h.write(data)
    with pytest.raises(BufferError):
        buf.extend(b"x")
    assert h.finish() == XXH3_64.hash_with_secret(bytes(buf), data)


def test_short_secret_fails_at_construction():
    short = b"\x00" * (MIN_SECRET_SIZE - 1)
    with pytest.raises(InvalidSecretLength):
        Buffered64.with_secret(short)
    with pytest.raises(InvalidSecretLength):
        Buffered128.with_secret(bytearray(short))
    Buffered64.with_secret(b"\x00" * MIN_SECRET_SIZE)


def test_small_capacity(data):
    h = Buffered64.with_seed(2, capacity=8)
    h.write(data[:8])
    assert not h.promoted
    h.write(data[8:9])
    assert h.promoted
    assert h.finish() == XXH3_64.hash_with_seed(2, data[:9])
    assert h.capacity == 8


def test_bad_capacity():
    with pytest.raises(ValueError):
        Buffered64.new(capacity=0)


def test_rejects_text():
    h = Buffered64.new()
    with pytest.raises(TypeError):
        h.write("text")
    h.write(b"x" * 1000)
    with pytest.raises(TypeError):
        h.update("text")


def test_accepts_buffer_types(data):
    h = Buffered64.new()
    h.write(bytearray(data[:5]))
    h.write(memoryview(data)[5:700])
    h.update(data[700:])
    assert h.finish() == XXH3_64.hash(data)


def test_canonical_digest(data):
    h = Buffered128.new()
    h.write(data[:50])
    assert h.digest_size == 16
    assert h.digest() == XXH3_128.hash(data[:50]).to_bytes(16, "big")
    assert h.hexdigest() == h.digest().hex()
    assert len(Buffered64.new().digest()) == 8


def test_generic_base_defaults_to_64_bit(data):
    h = BufferedHasher.new()
    h.write(data[:20])
    assert h.digest_bits == 64
    assert h.finish() == XXH3_64.hash(data[:20])


def test_promotion_is_logged(caplog, data):
    caplog.set_level(logging.DEBUG, logger="xxhbuf.buffered")
    h = Buffered64.with_seed(1)
    h.write(data)
    assert any("promoting Buffered64 (Seeded)" in r.getMessage() for r in caplog.records)


def test_pool_constructors_require_entropy_pool():
    with pytest.raises(TypeError):
        Buffered64.with_secret_copy(b"\x01" * 192)
    with pytest.raises(TypeError):
        Buffered64.with_secret_copy(bytearray(192))
    with pytest.raises(TypeError):
        Buffered64.with_secret_shared(b"\x01" * 192)


def test_xxh64_adapter(data):
    h = BufferedXXH64.with_seed(4)
    h.write(data[:300])
    h.write(data[300:])
    assert h.promoted
    assert h.finish() == XXH64.hash_with_seed(4, data)
    assert BufferedXXH64.with_secret_shared(POOL).finish() == XXH64.hash_with_secret(POOL, b"")
