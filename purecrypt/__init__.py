"""
purecrypt - cryptographic primitives implemented from first principles.

- BigInt: arbitrary-precision signed integers on 32-bit limbs
- Digests: MD5 and SHA-256
- AES-128/192/256 in CBC mode with PKCS#7 padding
- RSA key generation, X.509 / PKCS#8 DER keys, PKCS#1 v1.5 encryption
- Cipher facade selecting RSA or AES from a transformation string
"""

__version__ = "1.0.0"

from .errors import (
    CryptoError, DivisionByZero, NonPositiveModulus, NotInvertible, PrimeGenerationError,
    UnsupportedAlgorithm, InvalidKeySpec, InvalidKeyLength, DataTooLong, InvalidPadding,
    InvalidCiphertextLength, CipherStateError,
)
from .core_crypto.bigint import BigInt
from .core_crypto.digest import get_instance as get_digest
from .core_crypto.aes import encrypt_cbc, decrypt_cbc
from .keys.rsa_keys import (
    RSAPublicKey, RSAPrivateKey, KeyPair, KeyFactory, KeyPairGenerator,
    RSAKeyGenParameterSpec, X509EncodedKeySpec, PKCS8EncodedKeySpec,
)
from .keys.secret_key import SecretKeySpec, IvParameterSpec
from .cipher.cipher import Cipher, CipherKey

__all__ = [
    'BigInt',
    'get_digest',
    'encrypt_cbc',
    'decrypt_cbc',
    'RSAPublicKey',
    'RSAPrivateKey',
    'KeyPair',
    'KeyFactory',
    'KeyPairGenerator',
    'RSAKeyGenParameterSpec',
    'X509EncodedKeySpec',
    'PKCS8EncodedKeySpec',
    'SecretKeySpec',
    'IvParameterSpec',
    'Cipher',
    'CipherKey',
    'CryptoError',
    'DivisionByZero',
    'NonPositiveModulus',
    'NotInvertible',
    'PrimeGenerationError',
    'UnsupportedAlgorithm',
    'InvalidKeySpec',
    'InvalidKeyLength',
    'DataTooLong',
    'InvalidPadding',
    'InvalidCiphertextLength',
    'CipherStateError',
]
