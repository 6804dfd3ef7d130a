"""
Minimal ASN.1 DER Encoding

Just enough Distinguished Encoding Rules to write and read RSA keys:

| Type         | Tag  |
|--------------|------|
| INTEGER      | 0x02 |
| BIT STRING   | 0x03 |
| OCTET STRING | 0x04 |
| NULL         | 0x05 |
| OBJECT ID    | 0x06 |
| SEQUENCE     | 0x30 |

Lengths use the short form below 128 and the 0x81 / 0x82 long forms
up to 65535 bytes. Every parsing failure raises InvalidKeySpec.
"""

from typing import List, Tuple

from ..errors import InvalidKeySpec
from .bigint import BigInt


TAG_INTEGER = 0x02
TAG_BIT_STRING = 0x03
TAG_OCTET_STRING = 0x04
TAG_NULL = 0x05
TAG_OID = 0x06
TAG_SEQUENCE = 0x30

MAX_LENGTH = 0xFFFF

_TAG_NAMES = {
    TAG_INTEGER: "INTEGER",
    TAG_BIT_STRING: "BIT STRING",
    TAG_OCTET_STRING: "OCTET STRING",
    TAG_NULL: "NULL",
    TAG_OID: "OBJECT IDENTIFIER",
    TAG_SEQUENCE: "SEQUENCE",
}


# ============================================================================
# Encoding
# ============================================================================

def encode_length(length: int) -> bytes:
    """
    Encode a content length.

    Raises:
        ValueError: If length is negative or above 65535
    """
    if length < 0 or length > MAX_LENGTH:
        raise ValueError(f"DER length out of range: {length}")
    if length < 0x80:
        return bytes([length])
    if length <= 0xFF:
        return bytes([0x81, length])
    return bytes([0x82, length >> 8, length & 0xFF])


def encode_tlv(tag: int, content: bytes) -> bytes:
    """Tag, length, value."""
    return bytes([tag]) + encode_length(len(content)) + bytes(content)


def encode_integer(value: BigInt) -> bytes:
    """INTEGER holding the minimal two's-complement encoding of value."""
    return encode_tlv(TAG_INTEGER, value.to_bytes())


def encode_sequence(*elements: bytes) -> bytes:
    """SEQUENCE of already-encoded elements."""
    return encode_tlv(TAG_SEQUENCE, b''.join(elements))


def encode_bit_string(data: bytes) -> bytes:
    """BIT STRING with zero unused bits."""
    return encode_tlv(TAG_BIT_STRING, b'\x00' + bytes(data))


def encode_octet_string(data: bytes) -> bytes:
    return encode_tlv(TAG_OCTET_STRING, data)


def encode_null() -> bytes:
    return bytes([TAG_NULL, 0x00])


def encode_oid(dotted: str) -> bytes:
    """
    OBJECT IDENTIFIER from dotted notation.

    Example:
        >>> encode_oid("1.2.840.113549.1.1.1").hex()
        '06092a864886f70d010101'
    """
    arcs = [int(part) for part in dotted.split('.')]
    if len(arcs) < 2 or arcs[0] > 2 or (arcs[0] < 2 and arcs[1] >= 40):
        raise ValueError(f"Invalid object identifier: {dotted}")

    content = bytearray()
    for arc in [arcs[0] * 40 + arcs[1]] + arcs[2:]:
        # Base-128, high bit set on every byte but the last
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append(0x80 | (arc & 0x7F))
            arc >>= 7
        content.extend(reversed(chunk))
    return encode_tlv(TAG_OID, bytes(content))


def decode_oid(content: bytes) -> str:
    """Dotted notation from OBJECT IDENTIFIER content bytes."""
    if not content or content[-1] & 0x80:
        raise InvalidKeySpec("Truncated object identifier", detail="OBJECT IDENTIFIER")
    arcs: List[int] = []
    value = 0
    for byte in content:
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            arcs.append(value)
            value = 0
    first = min(arcs[0] // 40, 2)
    return '.'.join(str(arc) for arc in [first, arcs[0] - 40 * first] + arcs[1:])


# ============================================================================
# Decoding
# ============================================================================

class DerReader:
    """
    Sequential reader over DER-encoded bytes.

    Example:
        >>> reader = DerReader(encoded)
        >>> body = reader.read_sequence()
        >>> modulus = body.read_integer()
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def peek_tag(self) -> int:
        if self.at_end():
            raise InvalidKeySpec("Unexpected end of DER data")
        return self._data[self._pos]

    def _read_length(self) -> int:
        if self.at_end():
            raise InvalidKeySpec("Missing DER length")
        first = self._data[self._pos]
        self._pos += 1
        if first < 0x80:
            return first
        count = first & 0x7F
        if count not in (1, 2):
            raise InvalidKeySpec(f"Unsupported DER length form 0x{first:02x}", detail="length")
        if self.remaining < count:
            raise InvalidKeySpec("Truncated DER length", detail="length")
        length = int.from_bytes(self._data[self._pos:self._pos + count], byteorder='big')
        self._pos += count
        return length

    def read_tlv(self, expected_tag: int) -> bytes:
        """
        Read one element and return its content bytes.

        Raises:
            InvalidKeySpec: On a different tag, or a length running past the data
        """
        tag = self.peek_tag()
        if tag != expected_tag:
            raise InvalidKeySpec(
                f"Expected {_TAG_NAMES.get(expected_tag, hex(expected_tag))} "
                f"(0x{expected_tag:02x}), found tag 0x{tag:02x}",
                detail=f"0x{tag:02x}",
            )
        self._pos += 1
        length = self._read_length()
        if length > self.remaining:
            raise InvalidKeySpec(
                f"DER length {length} exceeds the {self.remaining} bytes available",
                detail="length",
            )
        content = self._data[self._pos:self._pos + length]
        self._pos += length
        return content

    def read_sequence(self) -> 'DerReader':
        return DerReader(self.read_tlv(TAG_SEQUENCE))

    def read_integer(self) -> BigInt:
        content = self.read_tlv(TAG_INTEGER)
        if not content:
            raise InvalidKeySpec("Empty INTEGER", detail="INTEGER")
        return BigInt.from_bytes(content)

    def read_bit_string(self) -> bytes:
        """Content of a BIT STRING, which must have zero unused bits."""
        content = self.read_tlv(TAG_BIT_STRING)
        if not content or content[0] != 0:
            raise InvalidKeySpec("BIT STRING with unused bits", detail="BIT STRING")
        return content[1:]

    def read_octet_string(self) -> bytes:
        return self.read_tlv(TAG_OCTET_STRING)

    def read_null(self) -> None:
        if self.read_tlv(TAG_NULL):
            raise InvalidKeySpec("NULL with content", detail="NULL")

    def read_oid(self) -> str:
        return decode_oid(self.read_tlv(TAG_OID))

    def expect_end(self) -> None:
        """Raise InvalidKeySpec if unread bytes remain."""
        if not self.at_end():
            raise InvalidKeySpec(f"{self.remaining} trailing bytes after DER structure")


def split_tlv(data: bytes) -> Tuple[int, bytes]:
    """Decode a single top-level element, rejecting trailing bytes."""
    reader = DerReader(data)
    tag = reader.peek_tag()
    content = reader.read_tlv(tag)
    reader.expect_end()
    return tag, content
