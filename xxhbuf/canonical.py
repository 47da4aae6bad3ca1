from __future__ import annotations

import struct

# Canonical digest representation: big-endian, as emitted by the reference
# library's XXH64_canonicalFromHash / XXH128_canonicalFromHash.
#
# Layout:
#   64-bit:  uint64 value
#   128-bit: uint64 high64, uint64 low64

MASK64 = 0xFFFFFFFFFFFFFFFF


def canonical_from_hash(digest: int, bits: int) -> bytes:
    """Encode an integer digest of width `bits` (64 or 128) into canonical bytes."""
    if bits == 64:
        return struct.pack(">Q", digest & MASK64)
    if bits == 128:
        return struct.pack(">QQ", (digest >> 64) & MASK64, digest & MASK64)
    raise ValueError(f"Unsupported digest width: {bits}")


def hash_from_canonical(buf: bytes) -> int:
    """Decode canonical bytes back into an integer digest; the width follows len(buf)."""
    if len(buf) == 8:
        return struct.unpack(">Q", buf)[0]
    if len(buf) == 16:
        high, low = struct.unpack(">QQ", buf)
        return (high << 64) | low
    raise ValueError(f"Bad canonical digest length: {len(buf)}")


def split128(digest: int) -> tuple[int, int]:
    """Return (low64, high64) of a 128-bit digest."""
    return digest & MASK64, (digest >> 64) & MASK64
