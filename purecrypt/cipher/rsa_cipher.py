"""
RSA on DER-encoded keys.

    public_der, private_der = generate_key_pair(1024)
    ciphertext = encrypt(public_der, b"hello")
    assert decrypt(private_der, ciphertext) == b"hello"
"""

from typing import NamedTuple, Optional, Union

from ..core_crypto.bigint import BigInt, RandomSource
from ..keys.rsa_keys import KeyFactory, KeyPairGenerator, RSAKeyGenParameterSpec
from .cipher import Cipher


TRANSFORMATION = "RSA/ECB/PKCS1Padding"


class DerKeyPair(NamedTuple):
    public_key_der: bytes
    private_key_der: bytes


def generate_key_pair(bits: int, public_exponent: Union[int, BigInt] = 65537,
                      **overrides) -> DerKeyPair:
    """
    Generate an RSA key pair and return both halves DER-encoded.

    Args:
        bits: Modulus size in bits
        public_exponent: e, 65537 by default
        **overrides: Settings forwarded to key generation (rounds, attempt caps)

    Returns:
        DerKeyPair(public_key_der=X.509 bytes, private_key_der=PKCS#8 bytes)
    """
    generator = KeyPairGenerator.get_instance("RSA")
    generator.initialize(RSAKeyGenParameterSpec(bits, BigInt(public_exponent)))
    pair = generator.generate_key_pair(**overrides)
    return DerKeyPair(pair.public.encoded, pair.private.encoded)


def encrypt(public_key_der: bytes, plaintext: bytes, rng: Optional[RandomSource] = None) -> bytes:
    """
    PKCS#1 v1.5 encrypt with an X.509 public key.

    Raises:
        InvalidKeySpec: If the key does not parse
        DataTooLong: If plaintext exceeds k - 11 bytes
    """
    key = KeyFactory.get_instance("RSA").generate_public(public_key_der)
    cipher = Cipher.get_instance(TRANSFORMATION)
    cipher.init(Cipher.ENCRYPT_MODE, key, rng=rng)
    return cipher.do_final(plaintext)


def decrypt(private_key_der: bytes, ciphertext: bytes) -> bytes:
    """
    PKCS#1 v1.5 decrypt with a PKCS#8 private key.

    Raises:
        InvalidKeySpec: If the key does not parse
        InvalidPadding: If the decrypted block is not PKCS#1 padded
    """
    key = KeyFactory.get_instance("RSA").generate_private(private_key_der)
    cipher = Cipher.get_instance(TRANSFORMATION)
    cipher.init(Cipher.DECRYPT_MODE, key)
    return cipher.do_final(ciphertext)
