"""
AES Block Cipher in CBC Mode (From Scratch)

Implements the AES (Rijndael) block transform for 128, 192 and 256-bit
keys, Cipher Block Chaining and PKCS#7 padding.

State layout: the 16-byte block is held column-major, so state[r + 4c]
is row r of column c, which is also the input byte order.

Round structure (encryption):
    AddRoundKey(0)
    rounds 1..Nr-1: SubBytes -> ShiftRows -> MixColumns -> AddRoundKey
    round Nr:       SubBytes -> ShiftRows -> AddRoundKey

Decryption applies the inverse steps in reverse order.
"""

from typing import List, Optional

from ..config import AES_BLOCK_SIZE, get_config
from ..errors import InvalidCiphertextLength, InvalidKeyLength, InvalidPadding
from ..integration.event_logger import EventType, record_event
from .aes_key_schedule import INV_S_BOX, S_BOX, AESKeySchedule


# ============================================================================
# GF(2^8) arithmetic, reduction polynomial x^8 + x^4 + x^3 + x + 1 (0x11B)
# ============================================================================

def _xtime(value: int) -> int:
    """Multiply by x (i.e. 2) in GF(2^8)."""
    value <<= 1
    if value & 0x100:
        value ^= 0x11B
    return value


def gf_multiply(a: int, b: int) -> int:
    """Multiply two field elements (Russian peasant method)."""
    result = 0
    while b:
        if b & 1:
            result ^= a
        a = _xtime(a)
        b >>= 1
    return result


def _table(factor: int) -> tuple:
    return tuple(gf_multiply(i, factor) for i in range(256))


# Read-only multiplication tables for (Inv)MixColumns
MUL2 = _table(2)
MUL3 = _table(3)
MUL9 = _table(9)
MUL11 = _table(11)
MUL13 = _table(13)
MUL14 = _table(14)


# ============================================================================
# Round steps
# ============================================================================

def _add_round_key(state: List[int], round_key: bytes) -> None:
    for i in range(16):
        state[i] ^= round_key[i]


def _sub_bytes(state: List[int], box) -> None:
    for i in range(16):
        state[i] = box[state[i]]


def _shift_rows(state: List[int]) -> List[int]:
    # Row r rotates left by r columns
    return [state[r + 4 * ((c + r) % 4)] for c in range(4) for r in range(4)]


def _inv_shift_rows(state: List[int]) -> List[int]:
    return [state[r + 4 * ((c - r) % 4)] for c in range(4) for r in range(4)]


def _mix_columns(state: List[int]) -> None:
    for c in range(0, 16, 4):
        s0, s1, s2, s3 = state[c:c + 4]
        state[c] = MUL2[s0] ^ MUL3[s1] ^ s2 ^ s3
        state[c + 1] = s0 ^ MUL2[s1] ^ MUL3[s2] ^ s3
        state[c + 2] = s0 ^ s1 ^ MUL2[s2] ^ MUL3[s3]
        state[c + 3] = MUL3[s0] ^ s1 ^ s2 ^ MUL2[s3]


def _inv_mix_columns(state: List[int]) -> None:
    for c in range(0, 16, 4):
        s0, s1, s2, s3 = state[c:c + 4]
        state[c] = MUL14[s0] ^ MUL11[s1] ^ MUL13[s2] ^ MUL9[s3]
        state[c + 1] = MUL9[s0] ^ MUL14[s1] ^ MUL11[s2] ^ MUL13[s3]
        state[c + 2] = MUL13[s0] ^ MUL9[s1] ^ MUL14[s2] ^ MUL11[s3]
        state[c + 3] = MUL11[s0] ^ MUL13[s1] ^ MUL9[s2] ^ MUL14[s3]


# ============================================================================
# Padding
# ============================================================================

def pkcs7_pad(data: bytes, block_size: int = AES_BLOCK_SIZE) -> bytes:
    """
    Append PKCS#7 padding.

    Always adds 1..block_size bytes, each equal to the pad length, so a
    block-aligned input gains a full block of padding.
    """
    pad_len = block_size - len(data) % block_size
    return bytes(data) + bytes([pad_len]) * pad_len


def pkcs7_unpad(data: bytes, strict: bool = False, block_size: int = AES_BLOCK_SIZE) -> bytes:
    """
    Strip PKCS#7 padding.

    The last byte p must satisfy 1 <= p <= block_size and the final p bytes
    must all equal p. When they do not, the data is returned unchanged
    (and a PADDING_IGNORED event is recorded) unless strict is set.

    Raises:
        InvalidPadding: If strict and the padding is malformed
    """
    if data:
        pad_len = data[-1]
        if 1 <= pad_len <= block_size and pad_len <= len(data):
            if all(b == pad_len for b in data[-pad_len:]):
                return bytes(data[:-pad_len])

    if strict:
        raise InvalidPadding("Invalid PKCS#7 padding", detail="pkcs7")
    record_event(EventType.PADDING_IGNORED, length=len(data))
    return bytes(data)


# ============================================================================
# Cipher
# ============================================================================

class AES:
    """
    AES block transform bound to one expanded key.

    The key schedule is computed once per instance; instances hold no
    other mutable state and can be shared between threads.

    Example:
        >>> aes = AES(bytes(16))
        >>> aes.encrypt_block(bytes(16)).hex()
        '66e94bd4ef8a2c3b884cfa59ca342b2e'
    """

    block_size = AES_BLOCK_SIZE

    def __init__(self, key: bytes):
        """
        Args:
            key: 16, 24 or 32 bytes

        Raises:
            InvalidKeyLength: For any other key size
        """
        self._schedule = AESKeySchedule(key)
        self._round_keys = self._schedule.round_keys
        self._rounds = self._schedule.num_rounds

    @property
    def num_rounds(self) -> int:
        return self._rounds

    @property
    def key_size(self) -> int:
        """Key size in bits."""
        return self._schedule.key_size

    def encrypt_block(self, block: bytes) -> bytes:
        """Encrypt exactly one 16-byte block."""
        _check_block(block)
        state = list(block)
        _add_round_key(state, self._round_keys[0])

        for round_num in range(1, self._rounds):
            _sub_bytes(state, S_BOX)
            state = _shift_rows(state)
            _mix_columns(state)
            _add_round_key(state, self._round_keys[round_num])

        _sub_bytes(state, S_BOX)
        state = _shift_rows(state)
        _add_round_key(state, self._round_keys[self._rounds])
        return bytes(state)

    def decrypt_block(self, block: bytes) -> bytes:
        """Decrypt exactly one 16-byte block."""
        _check_block(block)
        state = list(block)
        _add_round_key(state, self._round_keys[self._rounds])

        for round_num in range(self._rounds - 1, 0, -1):
            state = _inv_shift_rows(state)
            _sub_bytes(state, INV_S_BOX)
            _add_round_key(state, self._round_keys[round_num])
            _inv_mix_columns(state)

        state = _inv_shift_rows(state)
        _sub_bytes(state, INV_S_BOX)
        _add_round_key(state, self._round_keys[0])
        return bytes(state)

    def encrypt_cbc(self, iv: bytes, plaintext: bytes) -> bytes:
        """
        PKCS#7-pad and CBC-encrypt plaintext.

        Args:
            iv: 16-byte initialization vector
            plaintext: Any number of bytes (including zero)

        Returns:
            Ciphertext, a non-empty multiple of 16 bytes
        """
        previous = _check_iv(iv)
        padded = pkcs7_pad(plaintext)
        out = bytearray()
        for pos in range(0, len(padded), AES_BLOCK_SIZE):
            block = bytes(p ^ c for p, c in zip(padded[pos:pos + AES_BLOCK_SIZE], previous))
            previous = self.encrypt_block(block)
            out += previous
        return bytes(out)

    def decrypt_cbc(self, iv: bytes, ciphertext: bytes, strict: Optional[bool] = None) -> bytes:
        """
        CBC-decrypt ciphertext and strip PKCS#7 padding.

        Args:
            iv: 16-byte initialization vector
            ciphertext: Non-empty multiple of 16 bytes
            strict: Raise on malformed padding instead of returning the
                unstripped plaintext (defaults to the strict_aes_padding setting)

        Raises:
            InvalidCiphertextLength: If ciphertext is empty or not block-aligned
            InvalidPadding: If strict and the padding is malformed
        """
        previous = _check_iv(iv)
        if not ciphertext or len(ciphertext) % AES_BLOCK_SIZE:
            raise InvalidCiphertextLength(
                f"Ciphertext length {len(ciphertext)} is not a positive multiple of {AES_BLOCK_SIZE}",
                detail=str(len(ciphertext)),
            )
        if strict is None:
            strict = get_config()['strict_aes_padding']

        out = bytearray()
        for pos in range(0, len(ciphertext), AES_BLOCK_SIZE):
            block = bytes(ciphertext[pos:pos + AES_BLOCK_SIZE])
            decrypted = self.decrypt_block(block)
            out += bytes(d ^ p for d, p in zip(decrypted, previous))
            previous = block
        return pkcs7_unpad(bytes(out), strict=strict)

    def __repr__(self) -> str:
        return f"AES(bits={self.key_size})"


def _check_block(block: bytes) -> None:
    if len(block) != AES_BLOCK_SIZE:
        raise ValueError(f"AES block must be {AES_BLOCK_SIZE} bytes, got {len(block)}")


def _check_iv(iv: bytes) -> bytes:
    if len(iv) != AES_BLOCK_SIZE:
        raise InvalidKeyLength(
            f"IV must be {AES_BLOCK_SIZE} bytes, got {len(iv)} bytes",
            detail=str(len(iv)),
        )
    return bytes(iv)


def encrypt_cbc(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """
    AES-CBC encrypt with PKCS#7 padding.

    Args:
        key: 16, 24 or 32-byte key
        iv: 16-byte IV
        plaintext: Data to encrypt

    Returns:
        Ciphertext (len(plaintext) rounded up to the next multiple of 16,
        plus a full block when already aligned)

    Raises:
        InvalidKeyLength: If the key or IV has the wrong size
    """
    return AES(key).encrypt_cbc(iv, plaintext)


def decrypt_cbc(key: bytes, iv: bytes, ciphertext: bytes, strict: Optional[bool] = None) -> bytes:
    """
    AES-CBC decrypt and remove PKCS#7 padding.

    Raises:
        InvalidKeyLength: If the key or IV has the wrong size
        InvalidCiphertextLength: If ciphertext is empty or not block-aligned
        InvalidPadding: Only when strict padding is requested
    """
    return AES(key).decrypt_cbc(iv, ciphertext, strict=strict)
