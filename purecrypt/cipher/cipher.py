"""
Cipher Facade

A single entry point for RSA (PKCS#1 v1.5) and AES (CBC, PKCS#7)
selected by a transformation string:

    cipher = Cipher.get_instance("AES/CBC/PKCS5Padding")
    cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(key, "AES"), IvParameterSpec(iv))
    ciphertext = cipher.do_final(plaintext)

Keys are wrapped once, at init, in a CipherKey tagged with its kind, so
the encrypt/decrypt paths never inspect key types.

Once initialised a Cipher can run do_final() any number of times with the
same key, mode and IV.
"""

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..config import AES_BLOCK_SIZE
from ..core_crypto.aes import AES
from ..core_crypto.bigint import RandomSource
from ..core_crypto.rsa_math import decrypt_pkcs1, encrypt_pkcs1
from ..errors import CipherStateError, UnsupportedAlgorithm
from ..integration.event_logger import EventType, record_event
from ..keys.rsa_keys import RSAPrivateKey, RSAPublicKey
from ..keys.secret_key import IvParameterSpec, SecretKeySpec


ENCRYPT_MODE = 1
DECRYPT_MODE = 2

_MODE_NAMES = {ENCRYPT_MODE: "encrypt", DECRYPT_MODE: "decrypt"}


class CipherFamily(Enum):
    """Algorithm family picked from the transformation string."""
    AES = "AES"
    RSA = "RSA"


class KeyKind(Enum):
    RSA_PUBLIC = "rsa_public"
    RSA_PRIVATE = "rsa_private"
    AES = "aes"


@dataclass(frozen=True)
class CipherKey:
    """
    Key material tagged with its kind.

    Attributes:
        kind: Which variant this is
        rsa: RSA key for the RSA_PUBLIC / RSA_PRIVATE variants
        secret: Raw AES key bytes for the AES variant
    """
    kind: KeyKind
    rsa: Optional[Union[RSAPublicKey, RSAPrivateKey]] = None
    secret: bytes = b''

    @classmethod
    def rsa_public(cls, key: RSAPublicKey) -> 'CipherKey':
        return cls(kind=KeyKind.RSA_PUBLIC, rsa=key)

    @classmethod
    def rsa_private(cls, key: RSAPrivateKey) -> 'CipherKey':
        return cls(kind=KeyKind.RSA_PRIVATE, rsa=key)

    @classmethod
    def aes(cls, key: SecretKeySpec) -> 'CipherKey':
        """
        Raises:
            InvalidKeyLength: Unless the key is 16, 24 or 32 bytes
        """
        return cls(kind=KeyKind.AES, secret=key.validate_aes())

    @classmethod
    def wrap(cls, key) -> 'CipherKey':
        """
        Tag a key object.

        Raises:
            CipherStateError: For unsupported key types
        """
        if isinstance(key, CipherKey):
            return key
        if isinstance(key, RSAPublicKey):
            return cls.rsa_public(key)
        if isinstance(key, RSAPrivateKey):
            return cls.rsa_private(key)
        if isinstance(key, SecretKeySpec):
            return cls.aes(key)
        raise CipherStateError(f"Unsupported key type: {type(key).__name__}", detail=type(key).__name__)

    def __repr__(self) -> str:
        return f"CipherKey(kind={self.kind.value})"


# Which key kind each (family, mode) pair needs
_REQUIRED_KIND = {
    (CipherFamily.RSA, ENCRYPT_MODE): KeyKind.RSA_PUBLIC,
    (CipherFamily.RSA, DECRYPT_MODE): KeyKind.RSA_PRIVATE,
    (CipherFamily.AES, ENCRYPT_MODE): KeyKind.AES,
    (CipherFamily.AES, DECRYPT_MODE): KeyKind.AES,
}


class Cipher:
    """
    Mode-dispatching cipher for "RSA/..." and "AES/..." transformations.

    Example:
        >>> cipher = Cipher.get_instance("RSA/ECB/PKCS1Padding")
        >>> cipher.init(Cipher.ENCRYPT_MODE, pair.public)
        >>> ciphertext = cipher.do_final(b"secret")
    """

    ENCRYPT_MODE = ENCRYPT_MODE
    DECRYPT_MODE = DECRYPT_MODE

    def __init__(self, transformation: str, family: CipherFamily):
        self.transformation = transformation
        self.family = family
        self._mode: Optional[int] = None
        self._key: Optional[CipherKey] = None
        self._aes: Optional[AES] = None
        self._iv: Optional[bytes] = None
        self._rng: RandomSource = secrets.token_bytes
        self._pending = bytearray()

    @classmethod
    def get_instance(cls, transformation: str) -> 'Cipher':
        """
        Create a cipher for a transformation such as "AES/CBC/PKCS5Padding"
        or "RSA/ECB/PKCS1Padding".

        Any transformation mentioning RSA selects RSA, otherwise one
        mentioning AES selects AES; block mode and padding names are not
        interpreted further.

        Raises:
            UnsupportedAlgorithm: If the transformation names neither
        """
        normalized = transformation.upper() if isinstance(transformation, str) else ""
        if "RSA" in normalized:
            return cls(transformation, CipherFamily.RSA)
        if "AES" in normalized:
            return cls(transformation, CipherFamily.AES)
        raise UnsupportedAlgorithm(f"Unsupported transformation: {transformation}",
                                   detail=str(transformation))

    @property
    def algorithm(self) -> str:
        return self.family.value

    @property
    def mode(self) -> Optional[int]:
        return self._mode

    def init(self, mode: int, key, params: Optional[IvParameterSpec] = None,
             rng: Optional[RandomSource] = None) -> None:
        """
        Bind mode, key and (AES only) IV.

        Args:
            mode: Cipher.ENCRYPT_MODE or Cipher.DECRYPT_MODE
            key: RSAPublicKey (encrypt), RSAPrivateKey (decrypt),
                SecretKeySpec (AES) or a prepared CipherKey
            params: IvParameterSpec for AES; a zero IV is used when omitted
            rng: Byte source for PKCS#1 padding

        Raises:
            ValueError: On an unknown mode
            CipherStateError: If the key does not fit the transformation and mode,
                or AES params are not an IvParameterSpec
            InvalidKeyLength: On a bad AES key or IV size
        """
        if mode not in _MODE_NAMES:
            raise ValueError(f"Invalid cipher mode: {mode}")
        cipher_key = CipherKey.wrap(key)
        required = _REQUIRED_KIND[(self.family, mode)]
        if cipher_key.kind is not required:
            raise CipherStateError(
                f"{self.family.value} {_MODE_NAMES[mode]} needs a {required.value} key, "
                f"got {cipher_key.kind.value}",
                detail=cipher_key.kind.value,
            )

        if cipher_key.kind is KeyKind.AES:
            if params is not None and not isinstance(params, IvParameterSpec):
                raise CipherStateError(
                    f"AES parameters must be an IvParameterSpec, got {type(params).__name__}",
                    detail=type(params).__name__,
                )
            self._iv = params.validate() if params is not None else bytes(AES_BLOCK_SIZE)
            self._aes = AES(cipher_key.secret)
        else:
            self._iv = None
            self._aes = None

        self._mode = mode
        self._key = cipher_key
        self._pending.clear()
        if rng is not None:
            self._rng = rng
        record_event(EventType.CIPHER_INIT, transformation=self.transformation,
                     mode=_MODE_NAMES[mode])

    def update(self, data: bytes) -> bytes:
        """
        Buffer input for the next do_final().

        Returns:
            b'' (all output is produced by do_final)
        """
        self._require_init()
        self._pending.extend(data)
        return b''

    def do_final(self, data: bytes = b'') -> bytes:
        """
        Encrypt or decrypt buffered input plus data.

        Raises:
            CipherStateError: If init() has not been called
            DataTooLong: RSA input over the key's limit
            InvalidPadding: RSA padding check failed (or strict AES padding)
            InvalidCiphertextLength: AES decrypt input not block-aligned
        """
        self._require_init()
        payload = bytes(self._pending) + bytes(data)
        self._pending.clear()

        kind = self._key.kind
        if kind is KeyKind.RSA_PUBLIC:
            key = self._key.rsa
            return encrypt_pkcs1(payload, key.modulus, key.public_exponent, self._rng)
        if kind is KeyKind.RSA_PRIVATE:
            key = self._key.rsa
            return decrypt_pkcs1(payload, key.modulus, key.private_exponent)
        if self._mode == ENCRYPT_MODE:
            return self._aes.encrypt_cbc(self._iv, payload)
        return self._aes.decrypt_cbc(self._iv, payload)

    def get_iv(self) -> Optional[bytes]:
        """The IV in use (AES), or None."""
        return self._iv

    def get_block_size(self) -> int:
        """16 for AES, 0 for RSA."""
        return AES_BLOCK_SIZE if self.family is CipherFamily.AES else 0

    def _require_init(self) -> None:
        if self._key is None:
            raise CipherStateError("Cipher not initialized", detail=self.transformation)

    def __repr__(self) -> str:
        mode = _MODE_NAMES.get(self._mode, "uninitialized")
        return f"Cipher({self.transformation!r}, {mode})"
