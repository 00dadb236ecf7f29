"""
Bit-level helpers shared by the A5/2 generator.

Components:
- parity / majority primitives used by the clock controller and output function
- Key bit extraction (LSB first within each byte)
- MSB-first packing of generated bits into bytes, and the inverse
"""

from typing import Iterable, List


def parity(x: int) -> int:
    """
    Sum of the bits of x, modulo 2.

    Args:
        x: Non-negative integer of at most 32 bits

    Returns:
        0 or 1
    """
    x ^= x >> 16
    x ^= x >> 8
    x ^= x >> 4
    x ^= x >> 2
    x ^= x >> 1
    return x & 1


def majority(a: int, b: int, c: int) -> int:
    """Return 1 iff at least two of the arguments are non-zero."""
    return 1 if (a != 0) + (b != 0) + (c != 0) >= 2 else 0


def get_bit(value: int, position: int) -> int:
    return (value >> position) & 1


def key_bits(key: bytes) -> List[int]:
    """
    Expand a key into the order its bits are loaded.

    Bit i of the result is bit (i mod 8) of byte (i / 8), so the least
    significant bit of key[0] comes first.
    """
    return [(key[i // 8] >> (i & 7)) & 1 for i in range(len(key) * 8)]


def pack_bits(bits: Iterable[int]) -> bytes:
    """
    Pack bits into bytes, most significant bit first.

    The final byte is zero padded on the right when the bit count is not
    a multiple of 8.

    Args:
        bits: Sequence of 0/1 values in output order

    Returns:
        Packed bytes
    """
    out = bytearray()
    for i, bit in enumerate(bits):
        if i % 8 == 0:
            out.append(0)
        if bit not in (0, 1):
            raise ValueError(f"Bit values must be 0 or 1, got {bit!r}")
        out[-1] |= bit << (7 - (i & 7))
    return bytes(out)


def unpack_bits(data: bytes, count: int) -> List[int]:
    """
    Unpack the first `count` bits of MSB-first packed data.

    Args:
        data: Packed bytes
        count: Number of bits to read

    Returns:
        List of 0/1 values

    Raises:
        ValueError: If data holds fewer than `count` bits
    """
    if count < 0 or count > len(data) * 8:
        raise ValueError(f"Cannot read {count} bits from {len(data)} bytes")
    return [(data[i // 8] >> (7 - (i & 7))) & 1 for i in range(count)]
