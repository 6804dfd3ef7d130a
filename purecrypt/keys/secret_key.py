"""
Symmetric key and IV holders for the Cipher facade.
"""

from typing import Optional

from ..config import AES_BLOCK_SIZE, AES_KEY_SIZES
from ..errors import InvalidKeyLength


def _slice(data: bytes, offset: int, length: Optional[int]) -> bytes:
    if length is None:
        length = len(data) - offset
    if offset < 0 or length < 0 or offset + length > len(data):
        raise ValueError(f"Range [{offset}, {offset + length}) outside input of {len(data)} bytes")
    return bytes(data[offset:offset + length])


class SecretKeySpec:
    """
    Raw symmetric key.

    Args:
        key: Key bytes
        algorithm: Algorithm name, "AES" for the Cipher facade
        offset: Start of the key within key
        length: Number of key bytes (defaults to the rest)

    Example:
        >>> spec = SecretKeySpec(bytes(32), "AES")
        >>> len(spec.encoded)
        32
    """

    format = "RAW"

    def __init__(self, key: bytes, algorithm: str = "AES", offset: int = 0,
                 length: Optional[int] = None):
        self._key = _slice(key, offset, length)
        self.algorithm = algorithm

    @property
    def encoded(self) -> bytes:
        """Copy of the key bytes."""
        return bytes(self._key)

    def validate_aes(self) -> bytes:
        """
        Return the key bytes if they form an AES key.

        Raises:
            InvalidKeyLength: Unless the key is 16, 24 or 32 bytes
        """
        if len(self._key) not in AES_KEY_SIZES:
            raise InvalidKeyLength(
                f"AES key must be one of {AES_KEY_SIZES} bytes, got {len(self._key)} bytes",
                detail=str(len(self._key)),
            )
        return self.encoded

    def __eq__(self, other) -> bool:
        if not isinstance(other, SecretKeySpec):
            return NotImplemented
        return self.algorithm.upper() == other.algorithm.upper() and self._key == other._key

    def __hash__(self) -> int:
        return hash((self.algorithm.upper(), self._key))

    def __repr__(self) -> str:
        return f"SecretKeySpec(algorithm={self.algorithm!r}, bits={len(self._key) * 8})"


class IvParameterSpec:
    """Initialization vector, copied on construction."""

    def __init__(self, iv: bytes, offset: int = 0, length: Optional[int] = None):
        self._iv = _slice(iv, offset, length)

    @property
    def iv(self) -> bytes:
        return bytes(self._iv)

    def validate(self) -> bytes:
        """
        Raises:
            InvalidKeyLength: Unless the IV is 16 bytes
        """
        if len(self._iv) != AES_BLOCK_SIZE:
            raise InvalidKeyLength(
                f"IV must be {AES_BLOCK_SIZE} bytes, got {len(self._iv)} bytes",
                detail=str(len(self._iv)),
            )
        return self.iv

    def __repr__(self) -> str:
        return f"IvParameterSpec({self._iv.hex()})"
