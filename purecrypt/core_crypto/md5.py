"""
MD5 Hash Implementation (From Scratch)

Implements MD5 as defined in RFC 1321, as a streaming digest.

MD5 is broken for collision resistance; it is provided because
OpenSSL-compatible key derivation (EVP_BytesToKey) still depends on it.

Differences from SHA-256 in the shared block engine:
- Message words and the 64-bit length suffix are little-endian
- Output words are little-endian
"""

from typing import List

from ..config import MASK_32
from .block_digest import BlockDigest


# Initial state A, B, C, D
MD5_INITIAL = (0x67452301, 0xefcdab89, 0x98badcfe, 0x10325476)

# Per-round left-rotation amounts
SHIFTS = (
    (7, 12, 17, 22) * 4 +
    (5, 9, 14, 20) * 4 +
    (4, 11, 16, 23) * 4 +
    (6, 10, 15, 21) * 4
)

# T[i] = floor(abs(sin(i + 1)) * 2^32)
T = (
    0xd76aa478, 0xe8c7b756, 0x242070db, 0xc1bdceee, 0xf57c0faf, 0x4787c62a, 0xa8304613, 0xfd469501,
    0x698098d8, 0x8b44f7af, 0xffff5bb1, 0x895cd7be, 0x6b901122, 0xfd987193, 0xa679438e, 0x49b40821,
    0xf61e2562, 0xc040b340, 0x265e5a51, 0xe9b6c7aa, 0xd62f105d, 0x02441453, 0xd8a1e681, 0xe7d3fbc8,
    0x21e1cde6, 0xc33707d6, 0xf4d50d87, 0x455a14ed, 0xa9e3e905, 0xfcefa3f8, 0x676f02d9, 0x8d2a4c8a,
    0xfffa3942, 0x8771f681, 0x6d9d6122, 0xfde5380c, 0xa4beea44, 0x4bdecfa9, 0xf6bb4b60, 0xbebfbc70,
    0x289b7ec6, 0xeaa127fa, 0xd4ef3085, 0x04881d05, 0xd9d4d039, 0xe6db99e5, 0x1fa27cf8, 0xc4ac5665,
    0xf4292244, 0x432aff97, 0xab9423a7, 0xfc93a039, 0x655b59c3, 0x8f0ccc92, 0xffeff47d, 0x85845dd1,
    0x6fa87e4f, 0xfe2ce6e0, 0xa3014314, 0x4e0811a1, 0xf7537e82, 0xbd3af235, 0x2ad7d2bb, 0xeb86d391,
)


def _left_rotate(value: int, amount: int) -> int:
    return ((value << amount) | (value >> (32 - amount))) & MASK_32


class MD5(BlockDigest):
    """Streaming MD5."""

    algorithm = "MD5"
    digest_length = 16
    length_byteorder = "little"

    def _initial_state(self) -> List[int]:
        return list(MD5_INITIAL)

    def _compress(self, block) -> None:
        x = [int.from_bytes(block[i:i + 4], byteorder='little') for i in range(0, 64, 4)]
        a, b, c, d = self._state

        for i in range(64):
            if i < 16:
                f = (b & c) | (~b & d)
                g = i
            elif i < 32:
                f = (d & b) | (~d & c)
                g = (5 * i + 1) % 16
            elif i < 48:
                f = b ^ c ^ d
                g = (3 * i + 5) % 16
            else:
                f = c ^ (b | ~d)
                g = (7 * i) % 16

            f = (f + a + T[i] + x[g]) & MASK_32
            a, d, c = d, c, b
            b = (b + _left_rotate(f, SHIFTS[i])) & MASK_32

        state = self._state
        for i, value in enumerate((a, b, c, d)):
            state[i] = (state[i] + value) & MASK_32

    def _state_bytes(self) -> bytes:
        return b''.join(word.to_bytes(4, byteorder='little') for word in self._state)


def md5(data: bytes) -> bytes:
    """One-shot MD5 of data (16 bytes)."""
    return MD5().digest(data)


def md5_hex(data: bytes) -> str:
    return md5(data).hex()
