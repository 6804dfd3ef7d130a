"""
RSA Mathematical Operations Implementation

Implements the number-theoretic half of RSA on top of BigInt:
- RSA key pair generation (two probable primes, retry on bad pairs)
- PKCS#1 v1.5 type-2 (encryption) padding and its removal
- Raw RSA: c = m^e mod n and m = c^d mod n
- PKCS#1 v1.5 encryption / decryption of byte strings

Key encoding (DER) lives in purecrypt.keys.rsa_keys.
"""

import secrets
from dataclasses import dataclass
from typing import Optional

from ..config import PKCS1_OVERHEAD, get_config
from ..errors import DataTooLong, InvalidPadding, PrimeGenerationError
from ..integration.event_logger import EventType, record_event
from .bigint import BigInt, RandomSource

MIN_KEY_SIZE = 32

# PKCS#1 v1.5 block types
BLOCK_TYPE_SIGNATURE = 0x01
BLOCK_TYPE_ENCRYPTION = 0x02

# Index of the earliest acceptable 0x00 separator (8 bytes of PS minimum)
MIN_SEPARATOR_INDEX = 10


@dataclass(frozen=True)
class RSAKeyMaterial:
    """Raw numbers of a generated key pair: n = p*q, e*d = 1 mod (p-1)(q-1)."""
    modulus: BigInt
    public_exponent: BigInt
    private_exponent: BigInt
    prime_p: BigInt
    prime_q: BigInt

    @property
    def key_size(self) -> int:
        """Key size in bits."""
        return self.modulus.bit_length()


def key_length_bytes(modulus: BigInt) -> int:
    """k: length of the modulus in bytes."""
    return (modulus.bit_length() + 7) // 8


def generate_rsa_keypair(bits: int, public_exponent: Optional[BigInt] = None,
                         rng: RandomSource = secrets.token_bytes,
                         **overrides) -> RSAKeyMaterial:
    """
    Generate an RSA key pair.

    Generates two random primes p and q of bits // 2 bits each, computes
    n = p*q and d = e^(-1) mod (p-1)(q-1). The whole pair is discarded
    and regenerated when d does not exist, when p == q, or when n comes
    out shorter than bits - 1.

    Args:
        bits: Desired bit length of modulus n
        public_exponent: e (defaults to 65537)
        rng: Byte source, defaults to secrets.token_bytes
        **overrides: miller_rabin_rounds, max_prime_attempts, max_keypair_attempts

    Returns:
        RSAKeyMaterial with n, e, d, p and q

    Raises:
        ValueError: If bits is too small or e is not an odd number > 1
        PrimeGenerationError: If no usable pair is found within the attempt caps
    """
    config = get_config(**overrides)
    if bits < MIN_KEY_SIZE:
        raise ValueError(f"Key size must be at least {MIN_KEY_SIZE} bits, got {bits}")
    e = public_exponent if public_exponent is not None else BigInt.value_of(config['public_exponent'])
    if e <= BigInt.ONE or e.is_even():
        raise ValueError(f"Public exponent must be an odd number greater than 1, got {e}")

    prime_bits = bits // 2
    prime_overrides = {
        'miller_rabin_rounds': config['miller_rabin_rounds'],
        'max_prime_attempts': config['max_prime_attempts'],
    }

    for attempt in range(1, config['max_keypair_attempts'] + 1):
        try:
            p = BigInt.probable_prime(prime_bits, rng, **prime_overrides)
            q = BigInt.probable_prime(bits - prime_bits, rng, **prime_overrides)
        except PrimeGenerationError:
            record_event(EventType.PRIME_SEARCH_EXHAUSTED, bits=prime_bits,
                         max_attempts=config['max_prime_attempts'])
            raise

        n = p.multiply(q)
        phi = p.subtract(BigInt.ONE).multiply(q.subtract(BigInt.ONE))
        d = e.mod_inverse(phi)

        if d is None or p == q or n.bit_length() < bits - 1:
            record_event(EventType.KEYPAIR_RETRY, bits=bits, attempt=attempt)
            continue

        record_event(EventType.KEYPAIR_GENERATED, bits=n.bit_length(), attempts=attempt)
        return RSAKeyMaterial(modulus=n, public_exponent=e, private_exponent=d,
                              prime_p=p, prime_q=q)

    raise PrimeGenerationError(
        f"No usable {bits}-bit key pair in {config['max_keypair_attempts']} attempts"
    )


# ============================================================================
# PKCS#1 v1.5 padding
# ============================================================================

def _nonzero_random_bytes(count: int, rng: RandomSource) -> bytes:
    out = bytearray()
    while len(out) < count:
        out.extend(b for b in rng(count - len(out)) if b)
    return bytes(out)


def pkcs1_pad(message: bytes, k: int, rng: RandomSource = secrets.token_bytes) -> bytes:
    """
    Build the type-2 block 0x00 || 0x02 || PS || 0x00 || message.

    PS is k - len(message) - 3 non-zero random bytes (at least 8).

    Raises:
        DataTooLong: If len(message) > k - 11
    """
    max_len = k - PKCS1_OVERHEAD
    if len(message) > max_len:
        raise DataTooLong(
            f"Message of {len(message)} bytes exceeds the {max(max_len, 0)} byte limit for this key",
            detail=str(len(message)),
        )
    filler = _nonzero_random_bytes(k - len(message) - 3, rng)
    return b'\x00' + bytes([BLOCK_TYPE_ENCRYPTION]) + filler + b'\x00' + bytes(message)


def pkcs1_unpad(block: bytes) -> bytes:
    """
    Strip PKCS#1 v1.5 padding (block type 1 or 2).

    Raises:
        InvalidPadding: Unless block[0] == 0x00, block[1] is 0x01 or 0x02
            and a 0x00 separator follows at index >= 10
    """
    reason = None
    separator = -1
    if len(block) < PKCS1_OVERHEAD:
        reason = "block too short"
    elif block[0] != 0x00:
        reason = "leading byte not zero"
    elif block[1] not in (BLOCK_TYPE_SIGNATURE, BLOCK_TYPE_ENCRYPTION):
        reason = "unknown block type"
    else:
        separator = block.find(b'\x00', 2)
        if separator < MIN_SEPARATOR_INDEX:
            reason = "missing or early separator"

    if reason is not None:
        record_event(EventType.RSA_PADDING_REJECTED, reason=reason)
        raise InvalidPadding(f"Invalid PKCS#1 padding: {reason}", detail=reason)
    return bytes(block[separator + 1:])


# ============================================================================
# Raw RSA
# ============================================================================

def rsa_public_op(message: BigInt, exponent: BigInt, modulus: BigInt) -> BigInt:
    """
    c = m^e mod n.

    Raises:
        ValueError: If message is negative or not below the modulus
    """
    if message.signum < 0 or message >= modulus:
        raise ValueError("Message representative out of range")
    return message.mod_pow(exponent, modulus)


def rsa_private_op(ciphertext: BigInt, exponent: BigInt, modulus: BigInt) -> BigInt:
    """m = c^d mod n."""
    return ciphertext.mod_pow(exponent, modulus)


def encrypt_pkcs1(message: bytes, modulus: BigInt, public_exponent: BigInt,
                  rng: RandomSource = secrets.token_bytes) -> bytes:
    """
    PKCS#1 v1.5 encrypt message to exactly k bytes.

    Raises:
        DataTooLong: If len(message) > k - 11
    """
    k = key_length_bytes(modulus)
    m = BigInt.from_unsigned_bytes(pkcs1_pad(message, k, rng))
    c = rsa_public_op(m, public_exponent, modulus)
    return c.to_unsigned_bytes(k)


def decrypt_pkcs1(ciphertext: bytes, modulus: BigInt, private_exponent: BigInt) -> bytes:
    """
    Decrypt k-byte ciphertext and strip PKCS#1 v1.5 padding.

    Raises:
        DataTooLong: If ciphertext is longer than k bytes
        InvalidPadding: If the recovered block is not correctly padded
    """
    k = key_length_bytes(modulus)
    if len(ciphertext) > k:
        raise DataTooLong(
            f"Ciphertext of {len(ciphertext)} bytes is longer than the {k} byte modulus",
            detail=str(len(ciphertext)),
        )
    c = BigInt.from_unsigned_bytes(ciphertext)
    m = rsa_private_op(c, private_exponent, modulus)
    return pkcs1_unpad(m.to_unsigned_bytes(k))
