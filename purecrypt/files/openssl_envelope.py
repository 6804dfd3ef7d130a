"""
OpenSSL / CryptoJS Salted Envelope

Password-based AES-CBC in the format written by `openssl enc -aes-256-cbc`
(without -pbkdf2) and by CryptoJS.AES.encrypt(text, passphrase):

    "Salted__" (8) | salt (8) | AES-CBC ciphertext (PKCS#7 padded)

Often carried as base64 text. Key and IV come from EVP_BytesToKey:

    D_1 = H(password || salt)
    D_i = H(D_{i-1} || password || salt)
    key || iv = first key_len + iv_len bytes of D_1 || D_2 || ...

with H = MD5 by default.
"""

import base64
import binascii
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..config import AES_BLOCK_SIZE
from ..core_crypto.aes import AES
from ..core_crypto.digest import get_instance


# Constants
MAGIC_BYTES = b"Salted__"
SALT_SIZE = 8
HEADER_SIZE = len(MAGIC_BYTES) + SALT_SIZE  # 16 bytes
DEFAULT_KEY_SIZE = 32                       # AES-256
DEFAULT_DIGEST = "MD5"


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode('utf-8') if isinstance(value, str) else bytes(value)


def evp_bytes_to_key(password: Union[str, bytes], salt: Optional[bytes],
                     key_len: int = DEFAULT_KEY_SIZE, iv_len: int = AES_BLOCK_SIZE,
                     digest: str = DEFAULT_DIGEST, iterations: int = 1) -> Tuple[bytes, bytes]:
    """
    OpenSSL EVP_BytesToKey key derivation.

    Args:
        password: Passphrase (str is UTF-8 encoded)
        salt: 8-byte salt, or None / b'' for unsalted derivation
        key_len: Key bytes to produce
        iv_len: IV bytes to produce
        digest: Digest name ("MD5" or "SHA-256")
        iterations: Hash iterations per block (OpenSSL's count)

    Returns:
        Tuple of (key, iv)

    Raises:
        ValueError: If iterations < 1 or salt is neither empty nor 8 bytes
        UnsupportedAlgorithm: On an unknown digest name
    """
    if iterations < 1:
        raise ValueError("Iterations must be at least 1")
    salt = bytes(salt or b'')
    if salt and len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")

    password = _to_bytes(password)
    hasher = get_instance(digest)
    derived = b''
    block = b''
    while len(derived) < key_len + iv_len:
        block = hasher.digest(block + password + salt)
        for _ in range(iterations - 1):
            block = hasher.digest(block)
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


@dataclass
class SaltedHeader:
    """The 16-byte envelope header."""
    magic: bytes
    salt: bytes

    def to_bytes(self) -> bytes:
        """Serialize header to bytes."""
        return self.magic + self.salt

    @classmethod
    def from_bytes(cls, data: bytes) -> 'SaltedHeader':
        """
        Parse the header at the start of data.

        Raises:
            ValueError: If data is too short or the magic prefix is wrong
        """
        if len(data) < HEADER_SIZE:
            raise ValueError(f"Envelope too short: {len(data)} bytes")
        header = cls(magic=bytes(data[:len(MAGIC_BYTES)]), salt=bytes(data[len(MAGIC_BYTES):HEADER_SIZE]))
        if header.magic != MAGIC_BYTES:
            raise ValueError("Missing 'Salted__' prefix")
        return header


def _decode_envelope(data: Union[str, bytes]) -> bytes:
    """Accept raw envelope bytes or their base64 text."""
    if isinstance(data, str):
        try:
            return base64.b64decode(''.join(data.split()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Envelope is not valid base64: {e}") from e
    return bytes(data)


def decrypt_salted(data: Union[str, bytes], password: Union[str, bytes],
                   key_len: int = DEFAULT_KEY_SIZE, digest: str = DEFAULT_DIGEST,
                   strict: Optional[bool] = None) -> bytes:
    """
    Decrypt a "Salted__" envelope.

    Args:
        data: Envelope bytes, or its base64 text
        password: Passphrase
        key_len: AES key size in bytes (32 for aes-256-cbc)
        digest: EVP_BytesToKey digest
        strict: Forwarded to AES-CBC padding removal

    Returns:
        Decrypted plaintext

    Raises:
        ValueError: On bad base64 or a wrong header
        InvalidCiphertextLength: If the body is not block-aligned
    """
    raw = _decode_envelope(data)
    header = SaltedHeader.from_bytes(raw)
    key, iv = evp_bytes_to_key(password, header.salt, key_len, AES_BLOCK_SIZE, digest)
    return AES(key).decrypt_cbc(iv, raw[HEADER_SIZE:], strict=strict)


def encrypt_salted(plaintext: Union[str, bytes], password: Union[str, bytes],
                   salt: Optional[bytes] = None, key_len: int = DEFAULT_KEY_SIZE,
                   digest: str = DEFAULT_DIGEST, as_base64: bool = False) -> Union[bytes, str]:
    """
    Encrypt into a "Salted__" envelope.

    Args:
        plaintext: Data to encrypt (str is UTF-8 encoded)
        password: Passphrase
        salt: 8-byte salt (random when omitted)
        key_len: AES key size in bytes
        digest: EVP_BytesToKey digest
        as_base64: Return base64 text instead of bytes

    Returns:
        Envelope bytes, or base64 text
    """
    if salt is None:
        salt = secrets.token_bytes(SALT_SIZE)
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be {SALT_SIZE} bytes, got {len(salt)}")

    key, iv = evp_bytes_to_key(password, salt, key_len, AES_BLOCK_SIZE, digest)
    envelope = SaltedHeader(MAGIC_BYTES, bytes(salt)).to_bytes() + AES(key).encrypt_cbc(iv, _to_bytes(plaintext))
    if as_base64:
        return base64.b64encode(envelope).decode('ascii')
    return envelope
