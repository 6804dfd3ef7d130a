"""
Streaming Merkle-Damgard Digest Engine

Shared machinery for 64-byte-block hash functions (MD5, SHA-256):
- Fixed 64-byte pending-block buffer with an explicit fill counter
- Full blocks are compressed as soon as they are available
- Final padding: 0x80, zero bytes, then the 64-bit message bit length
- digest() finalizes and resets the instance for reuse

Subclasses provide the initial state, the compression function, the
byte order of the length suffix and the output encoding.
"""

from typing import List, Optional

from ..config import DIGEST_BLOCK_SIZE


LENGTH_FIELD_SIZE = 8
MASK_64 = 0xFFFFFFFFFFFFFFFF


class BlockDigest:
    """
    Base class for streaming digests.

    Not safe for concurrent update() calls on the same instance; use one
    instance per stream.
    """

    algorithm: str = ""
    digest_length: int = 0
    length_byteorder: str = "big"

    def __init__(self):
        self._buffer = bytearray(DIGEST_BLOCK_SIZE)
        self._buffered = 0
        self._count = 0
        self._state: List[int] = []
        self.reset()

    # ------------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------------

    def _initial_state(self) -> List[int]:
        raise NotImplementedError

    def _compress(self, block) -> None:
        """Fold one 64-byte block into self._state."""
        raise NotImplementedError

    def _state_bytes(self) -> bytes:
        raise NotImplementedError

    # ------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------

    def reset(self) -> None:
        """Return to the initial state, discarding buffered input."""
        self._state = self._initial_state()
        self._buffered = 0
        self._count = 0

    def update(self, data: bytes, offset: int = 0, length: Optional[int] = None) -> None:
        """
        Absorb data[offset:offset + length].

        Args:
            data: Input bytes (bytes, bytearray or memoryview)
            offset: Start index in data
            length: Number of bytes to take (defaults to the rest of data)

        Raises:
            ValueError: If offset/length fall outside data
        """
        if length is None:
            length = len(data) - offset
        if offset < 0 or length < 0 or offset + length > len(data):
            raise ValueError(f"Range [{offset}, {offset + length}) outside input of {len(data)} bytes")

        view = memoryview(data)[offset:offset + length]
        self._count += length
        pos = 0

        # Top up a partially filled block first
        if self._buffered:
            take = min(DIGEST_BLOCK_SIZE - self._buffered, length)
            self._buffer[self._buffered:self._buffered + take] = view[:take]
            self._buffered += take
            pos = take
            if self._buffered == DIGEST_BLOCK_SIZE:
                self._compress(self._buffer)
                self._buffered = 0

        while length - pos >= DIGEST_BLOCK_SIZE:
            self._compress(view[pos:pos + DIGEST_BLOCK_SIZE])
            pos += DIGEST_BLOCK_SIZE

        if pos < length:
            rest = length - pos
            self._buffer[:rest] = view[pos:]
            self._buffered = rest

    def digest(self, data: Optional[bytes] = None) -> bytes:
        """
        Finish the hash and reset the instance.

        Args:
            data: Optional final chunk absorbed before finishing

        Returns:
            digest_length bytes
        """
        if data is not None:
            self.update(data)

        bit_count = (self._count * 8) & MASK_64
        pad_len = (56 - self._buffered) if self._buffered < 56 else (120 - self._buffered)
        self.update(b'\x80' + b'\x00' * (pad_len - 1))
        self.update(bit_count.to_bytes(LENGTH_FIELD_SIZE, byteorder=self.length_byteorder))

        result = self._state_bytes()
        self.reset()
        return result

    def digest_into(self, output: bytearray, offset: int = 0, length: Optional[int] = None) -> int:
        """
        Finish the hash into a caller buffer.

        Copies at most `length` bytes of the digest to output[offset:].

        Returns:
            Number of bytes written
        """
        result = self.digest()
        if length is None:
            length = len(result)
        count = min(length, len(result))
        if offset < 0 or offset + count > len(output):
            raise ValueError("Output buffer too small")
        output[offset:offset + count] = result[:count]
        return count

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> 'BlockDigest':
        """Independent clone of the running state."""
        clone = type(self).__new__(type(self))
        clone._buffer = bytearray(self._buffer)
        clone._buffered = self._buffered
        clone._count = self._count
        clone._state = list(self._state)
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}(buffered={self._buffered}, count={self._count})"
