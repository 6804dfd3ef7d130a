"""
AES Key Expansion (Rijndael Key Schedule)

Expands a 128, 192 or 256-bit key into Nr + 1 round keys for AES
encryption/decryption.

Components:
- S-box (Rijndael substitution box) and its inverse
- RotWord: Rotate word left by 1 byte
- SubWord: Apply S-box substitution
- Rcon: Round constants
- Key expansion for Nk = 4, 6 or 8 key words

| Key size | Nk | Nr | Expanded words |
|----------|----|----|----------------|
| 128 bit  | 4  | 10 | 44             |
| 192 bit  | 6  | 12 | 52             |
| 256 bit  | 8  | 14 | 60             |
"""

from typing import List

from ..config import AES_BLOCK_SIZE, AES_KEY_SIZES
from ..errors import InvalidKeyLength


# Rijndael S-box (Substitution box)
# This is the standard AES S-box - a non-linear substitution table
S_BOX = (
    0x63, 0x7c, 0x77, 0x7b, 0xf2, 0x6b, 0x6f, 0xc5, 0x30, 0x01, 0x67, 0x2b, 0xfe, 0xd7, 0xab, 0x76,
    0xca, 0x82, 0xc9, 0x7d, 0xfa, 0x59, 0x47, 0xf0, 0xad, 0xd4, 0xa2, 0xaf, 0x9c, 0xa4, 0x72, 0xc0,
    0xb7, 0xfd, 0x93, 0x26, 0x36, 0x3f, 0xf7, 0xcc, 0x34, 0xa5, 0xe5, 0xf1, 0x71, 0xd8, 0x31, 0x15,
    0x04, 0xc7, 0x23, 0xc3, 0x18, 0x96, 0x05, 0x9a, 0x07, 0x12, 0x80, 0xe2, 0xeb, 0x27, 0xb2, 0x75,
    0x09, 0x83, 0x2c, 0x1a, 0x1b, 0x6e, 0x5a, 0xa0, 0x52, 0x3b, 0xd6, 0xb3, 0x29, 0xe3, 0x2f, 0x84,
    0x53, 0xd1, 0x00, 0xed, 0x20, 0xfc, 0xb1, 0x5b, 0x6a, 0xcb, 0xbe, 0x39, 0x4a, 0x4c, 0x58, 0xcf,
    0xd0, 0xef, 0xaa, 0xfb, 0x43, 0x4d, 0x33, 0x85, 0x45, 0xf9, 0x02, 0x7f, 0x50, 0x3c, 0x9f, 0xa8,
    0x51, 0xa3, 0x40, 0x8f, 0x92, 0x9d, 0x38, 0xf5, 0xbc, 0xb6, 0xda, 0x21, 0x10, 0xff, 0xf3, 0xd2,
    0xcd, 0x0c, 0x13, 0xec, 0x5f, 0x97, 0x44, 0x17, 0xc4, 0xa7, 0x7e, 0x3d, 0x64, 0x5d, 0x19, 0x73,
    0x60, 0x81, 0x4f, 0xdc, 0x22, 0x2a, 0x90, 0x88, 0x46, 0xee, 0xb8, 0x14, 0xde, 0x5e, 0x0b, 0xdb,
    0xe0, 0x32, 0x3a, 0x0a, 0x49, 0x06, 0x24, 0x5c, 0xc2, 0xd3, 0xac, 0x62, 0x91, 0x95, 0xe4, 0x79,
    0xe7, 0xc8, 0x37, 0x6d, 0x8d, 0xd5, 0x4e, 0xa9, 0x6c, 0x56, 0xf4, 0xea, 0x65, 0x7a, 0xae, 0x08,
    0xba, 0x78, 0x25, 0x2e, 0x1c, 0xa6, 0xb4, 0xc6, 0xe8, 0xdd, 0x74, 0x1f, 0x4b, 0xbd, 0x8b, 0x8a,
    0x70, 0x3e, 0xb5, 0x66, 0x48, 0x03, 0xf6, 0x0e, 0x61, 0x35, 0x57, 0xb9, 0x86, 0xc1, 0x1d, 0x9e,
    0xe1, 0xf8, 0x98, 0x11, 0x69, 0xd9, 0x8e, 0x94, 0x9b, 0x1e, 0x87, 0xe9, 0xce, 0x55, 0x28, 0xdf,
    0x8c, 0xa1, 0x89, 0x0d, 0xbf, 0xe6, 0x42, 0x68, 0x41, 0x99, 0x2d, 0x0f, 0xb0, 0x54, 0xbb, 0x16,
)


def _invert_table(table) -> tuple:
    inverse = [0] * 256
    for index, value in enumerate(table):
        inverse[value] = index
    return tuple(inverse)


# Inverse S-box used by InvSubBytes
INV_S_BOX = _invert_table(S_BOX)

# Round constants (Rcon) for key expansion
# Rcon[i] = [rc[i], 0, 0, 0] where rc[i] = x^(i-1) in GF(2^8)
# AES-128 consumes up to Rcon[10], AES-192 up to Rcon[8], AES-256 up to Rcon[7]
RCON = (
    0x00,  # Not used (index 0)
    0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80, 0x1b, 0x36,
)

# Key length in bytes -> (Nk, Nr)
KEY_PARAMETERS = {
    16: (4, 10),
    24: (6, 12),
    32: (8, 14),
}

NB = AES_BLOCK_SIZE // 4  # Words per block


def sub_word(word: List[int]) -> List[int]:
    """Apply S-box substitution to each byte in a 4-byte word."""
    return [S_BOX[b] for b in word]


def rot_word(word: List[int]) -> List[int]:
    """
    Rotate a 4-byte word left by one byte.
    [a, b, c, d] -> [b, c, d, a]
    """
    return word[1:] + word[:1]


def xor_words(word1: List[int], word2: List[int]) -> List[int]:
    """XOR two 4-byte words together."""
    return [a ^ b for a, b in zip(word1, word2)]


def bytes_to_words(key: bytes) -> List[List[int]]:
    """Split bytes (length a multiple of 4) into 4-byte words."""
    return [list(key[i:i + 4]) for i in range(0, len(key), 4)]


def words_to_bytes(words: List[List[int]]) -> bytes:
    """Concatenate 4-byte words back into bytes."""
    return bytes(b for word in words for b in word)


def rounds_for_key(key: bytes) -> int:
    """
    Number of AES rounds for a raw key.

    Raises:
        InvalidKeyLength: If key is not 16, 24 or 32 bytes
    """
    params = KEY_PARAMETERS.get(len(key))
    if params is None:
        raise InvalidKeyLength(
            f"AES key must be one of {AES_KEY_SIZES} bytes, got {len(key)} bytes",
            detail=str(len(key)),
        )
    return params[1]


def key_expansion(key: bytes) -> List[bytes]:
    """
    Perform AES key expansion (Rijndael key schedule).

    Args:
        key: 16, 24 or 32-byte encryption key

    Returns:
        List of Nr + 1 round keys, each 16 bytes

    Raises:
        InvalidKeyLength: If key is not 16, 24 or 32 bytes

    Example:
        >>> round_keys = key_expansion(bytes(range(32)))
        >>> len(round_keys)
        15
        >>> len(round_keys[0])
        16
    """
    nr = rounds_for_key(key)
    nk = len(key) // 4
    total_words = NB * (nr + 1)

    # Initialize with the original key words
    w = bytes_to_words(key)

    for i in range(nk, total_words):
        temp = w[i - 1]

        if i % nk == 0:
            # Every Nk words: RotWord + SubWord + Rcon
            temp = sub_word(rot_word(temp))
            temp[0] ^= RCON[i // nk]
        elif nk > 6 and i % nk == 4:
            # 256-bit keys only: extra SubWord halfway through each group
            temp = sub_word(temp)

        w.append(xor_words(w[i - nk], temp))

    # Group into 16-byte round keys (4 words each)
    return [words_to_bytes(w[i:i + NB]) for i in range(0, total_words, NB)]


class AESKeySchedule:
    """
    Expanded AES key.

    Example:
        >>> schedule = AESKeySchedule(key)
        >>> schedule.num_rounds
        10
        >>> round_0_key = schedule.get_round_key(0)
    """

    def __init__(self, key: bytes):
        """
        Args:
            key: 16, 24 or 32-byte encryption key

        Raises:
            InvalidKeyLength: For any other key size
        """
        self._key = bytes(key)
        self._round_keys = tuple(key_expansion(self._key))

    @property
    def key_size(self) -> int:
        """Key size in bits."""
        return len(self._key) * 8

    @property
    def num_rounds(self) -> int:
        """Nr: 10, 12 or 14."""
        return len(self._round_keys) - 1

    @property
    def round_keys(self) -> List[bytes]:
        return list(self._round_keys)

    @property
    def expanded_key(self) -> bytes:
        """Full expanded key as flat bytes (16 * (Nr + 1) bytes)."""
        return b''.join(self._round_keys)

    def get_round_key(self, round_num: int) -> bytes:
        """
        Get the round key for a specific round.

        Raises:
            ValueError: If round_num is outside 0..Nr
        """
        if round_num < 0 or round_num > self.num_rounds:
            raise ValueError(f"Round number must be 0-{self.num_rounds}, got {round_num}")
        return self._round_keys[round_num]

    def __repr__(self) -> str:
        return f"AESKeySchedule(bits={self.key_size}, rounds={self.num_rounds})"
