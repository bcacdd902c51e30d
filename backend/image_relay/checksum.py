"""
CRC-32 Checksum

Reflected CRC-32 (polynomial 0xEDB88320, init 0xFFFFFFFF, final XOR
0xFFFFFFFF), the zlib/gzip variant. The upload API expects this value
in the `cs` query parameter.
"""

from typing import List

POLYNOMIAL = 0xEDB88320
MASK = 0xFFFFFFFF


def _shift_byte(register: int) -> int:
    """Run the 8 shift/xor rounds for one byte already mixed into the register."""
    for _ in range(8):
        if register & 1:
            register = (register >> 1) ^ POLYNOMIAL
        else:
            register >>= 1
    return register


def _build_table() -> List[int]:
    return [_shift_byte(i) for i in range(256)]


_TABLE = _build_table()


def crc32_bitwise(data: bytes) -> int:
    """
    Table-free bit-by-bit CRC-32.

    Slow on large inputs; kept as the reference the table is derived from.
    """
    crc = MASK
    for b in data:
        crc = _shift_byte(crc ^ b)
    return crc ^ MASK


def crc32(data: bytes) -> int:
    """
    Compute the CRC-32 of `data` as an unsigned 32-bit integer.

    Uses a lookup table built from the bit-by-bit step, so the result is
    identical to crc32_bitwise().

    Example:
        crc32(b"123456789") == 0xCBF43926
    """
    crc = MASK
    table = _TABLE
    for b in data:
        crc = table[(crc ^ b) & 0xFF] ^ (crc >> 8)
    return crc ^ MASK
