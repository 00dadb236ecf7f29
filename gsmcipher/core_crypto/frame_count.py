"""
GSM frame number -> COUNT mapping

The cipher core takes an opaque 22-bit frame value. On a real GSM link
that value is COUNT, derived from the TDMA frame number FN:

    T1 = FN div (26 x 51)   (11 bits)
    T3 = FN mod 51          (6 bits)
    T2 = FN mod 26          (5 bits)
    COUNT = T1 || T3 || T2

These helpers are for callers that hold FN; the cipher never calls them.
"""

from typing import Tuple


HYPERFRAME = 2048 * 26 * 51  # 2715648 TDMA frames
SUPERFRAME = 26 * 51


def tdma_to_count(fn: int) -> int:
    """
    Map a TDMA frame number to the 22-bit COUNT value.

    Args:
        fn: TDMA frame number, 0 <= fn < 2715648

    Returns:
        COUNT value for use as the cipher frame input

    Raises:
        ValueError: If fn is outside the hyperframe
    """
    if not 0 <= fn < HYPERFRAME:
        raise ValueError(f"Frame number must be in [0, {HYPERFRAME}), got {fn}")
    t1 = fn // SUPERFRAME
    t2 = fn % 26
    t3 = fn % 51
    return (t1 << 11) | (t3 << 5) | t2


def count_to_fields(count: int) -> Tuple[int, int, int]:
    """Split a COUNT value into (T1, T2, T3)."""
    return (count >> 11) & 0x7FF, count & 0x1F, (count >> 5) & 0x3F
