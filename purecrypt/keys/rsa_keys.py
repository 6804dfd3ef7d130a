"""
RSA Key Objects and DER Encoding

Public keys are encoded as X.509 SubjectPublicKeyInfo:

    SEQUENCE {
        SEQUENCE { OID 1.2.840.113549.1.1.1, NULL }
        BIT STRING { SEQUENCE { modulus INTEGER, publicExponent INTEGER } }
    }

Private keys are encoded as PKCS#8 PrivateKeyInfo in the minimal form
(no CRT parameters):

    SEQUENCE {
        INTEGER 0
        SEQUENCE { OID 1.2.840.113549.1.1.1, NULL }
        OCTET STRING { SEQUENCE { version 0, modulus, privateExponent } }
    }

The private key decoder also accepts the full PKCS#1 RSAPrivateKey body
(version, n, e, d, p, q, dP, dQ, qInv) written by other tooling.
"""

import secrets
from dataclasses import dataclass, field
from typing import Optional, Union

from ..config import get_config
from ..core_crypto.bigint import BigInt, RandomSource
from ..core_crypto.der import (
    DerReader, encode_bit_string, encode_integer, encode_null, encode_octet_string,
    encode_oid, encode_sequence
)
from ..core_crypto.rsa_math import generate_rsa_keypair
from ..errors import InvalidKeySpec, UnsupportedAlgorithm


RSA_ALGORITHM = "RSA"
RSA_ENCRYPTION_OID = "1.2.840.113549.1.1.1"

FORMAT_X509 = "X.509"
FORMAT_PKCS8 = "PKCS#8"


def _algorithm_identifier() -> bytes:
    return encode_sequence(encode_oid(RSA_ENCRYPTION_OID), encode_null())


def _read_algorithm_identifier(reader: DerReader) -> None:
    alg = reader.read_sequence()
    oid = alg.read_oid()
    if oid != RSA_ENCRYPTION_OID:
        raise InvalidKeySpec(f"Not an RSA key (algorithm {oid})", detail=oid)
    # Parameters are NULL for rsaEncryption, though some encoders omit them
    if not alg.at_end():
        alg.read_null()
    alg.expect_end()


def _require_positive(value: BigInt, name: str) -> BigInt:
    if value.signum <= 0:
        raise InvalidKeySpec(f"RSA {name} must be positive", detail=name)
    return value


# ============================================================================
# Key objects
# ============================================================================

@dataclass(frozen=True)
class RSAPublicKey:
    """RSA public key (n, e)."""
    modulus: BigInt
    public_exponent: BigInt

    algorithm = RSA_ALGORITHM
    format = FORMAT_X509

    @property
    def key_size(self) -> int:
        """Key size in bits."""
        return self.modulus.bit_length()

    @property
    def encoded(self) -> bytes:
        """X.509 SubjectPublicKeyInfo DER."""
        return encode_public_key(self)

    def __repr__(self) -> str:
        return f"RSAPublicKey(bits={self.key_size}, e={self.public_exponent})"


@dataclass(frozen=True)
class RSAPrivateKey:
    """
    RSA private key.

    Only the modulus and private exponent take part in equality and in
    the encoding; e, p and q are kept when known (freshly generated keys,
    or keys parsed from a full PKCS#1 body).
    """
    modulus: BigInt
    private_exponent: BigInt
    public_exponent: Optional[BigInt] = field(default=None, compare=False)
    prime_p: Optional[BigInt] = field(default=None, compare=False)
    prime_q: Optional[BigInt] = field(default=None, compare=False)

    algorithm = RSA_ALGORITHM
    format = FORMAT_PKCS8

    @property
    def key_size(self) -> int:
        return self.modulus.bit_length()

    @property
    def encoded(self) -> bytes:
        """PKCS#8 PrivateKeyInfo DER (minimal form)."""
        return encode_private_key(self)

    def __repr__(self) -> str:
        # Never show d, p or q
        return f"RSAPrivateKey(bits={self.key_size})"


@dataclass(frozen=True)
class KeyPair:
    public: RSAPublicKey
    private: RSAPrivateKey


RSAKey = Union[RSAPublicKey, RSAPrivateKey]


# ============================================================================
# DER encode / decode
# ============================================================================

def encode_public_key(key: RSAPublicKey) -> bytes:
    """Encode a public key as X.509 SubjectPublicKeyInfo."""
    rsa_key = encode_sequence(encode_integer(key.modulus), encode_integer(key.public_exponent))
    return encode_sequence(_algorithm_identifier(), encode_bit_string(rsa_key))


def decode_public_key(encoded: bytes) -> RSAPublicKey:
    """
    Parse X.509 SubjectPublicKeyInfo DER.

    Raises:
        InvalidKeySpec: On any unexpected tag, bad length, foreign
            algorithm or trailing data
    """
    outer = DerReader(encoded)
    info = outer.read_sequence()
    outer.expect_end()

    _read_algorithm_identifier(info)
    body = DerReader(info.read_bit_string())
    info.expect_end()

    rsa_key = body.read_sequence()
    body.expect_end()
    n = _require_positive(rsa_key.read_integer(), "modulus")
    e = _require_positive(rsa_key.read_integer(), "public exponent")
    rsa_key.expect_end()
    return RSAPublicKey(modulus=n, public_exponent=e)


def encode_private_key(key: RSAPrivateKey) -> bytes:
    """Encode a private key as PKCS#8 PrivateKeyInfo with a {0, n, d} body."""
    rsa_key = encode_sequence(
        encode_integer(BigInt.ZERO),
        encode_integer(key.modulus),
        encode_integer(key.private_exponent),
    )
    return encode_sequence(
        encode_integer(BigInt.ZERO),
        _algorithm_identifier(),
        encode_octet_string(rsa_key),
    )


def decode_private_key(encoded: bytes) -> RSAPrivateKey:
    """
    Parse PKCS#8 PrivateKeyInfo DER.

    The inner body may be {version, n, d} or the standard PKCS#1
    {version, n, e, d, p, q, ...}.

    Raises:
        InvalidKeySpec: On any unexpected tag, bad length, foreign
            algorithm or an inner body of an unknown shape
    """
    outer = DerReader(encoded)
    info = outer.read_sequence()
    outer.expect_end()

    info.read_integer()  # PrivateKeyInfo version
    _read_algorithm_identifier(info)
    body = DerReader(info.read_octet_string())
    # Optional [0] attributes may follow; they carry nothing we use

    rsa_key = body.read_sequence()
    body.expect_end()
    fields = []
    while not rsa_key.at_end():
        fields.append(rsa_key.read_integer())

    if len(fields) == 3:
        _, n, d = fields
        return RSAPrivateKey(
            modulus=_require_positive(n, "modulus"),
            private_exponent=_require_positive(d, "private exponent"),
        )
    if len(fields) >= 6:
        _, n, e, d, p, q = fields[:6]
        return RSAPrivateKey(
            modulus=_require_positive(n, "modulus"),
            private_exponent=_require_positive(d, "private exponent"),
            public_exponent=e,
            prime_p=p,
            prime_q=q,
        )
    raise InvalidKeySpec(f"Unexpected RSA private key with {len(fields)} fields", detail=str(len(fields)))


# ============================================================================
# Key specs, factory and generator
# ============================================================================

class EncodedKeySpec:
    """DER-encoded key material tagged with its format."""

    format = ""

    def __init__(self, encoded: bytes):
        self._encoded = bytes(encoded)

    @property
    def encoded(self) -> bytes:
        return self._encoded


class X509EncodedKeySpec(EncodedKeySpec):
    format = FORMAT_X509


class PKCS8EncodedKeySpec(EncodedKeySpec):
    format = FORMAT_PKCS8


def _check_rsa(algorithm: str) -> None:
    if not isinstance(algorithm, str) or algorithm.upper() != RSA_ALGORITHM:
        raise UnsupportedAlgorithm(f"Unsupported algorithm: {algorithm}", detail=str(algorithm))


class KeyFactory:
    """
    Builds key objects from encoded key specs.

    Example:
        >>> factory = KeyFactory.get_instance("RSA")
        >>> public = factory.generate_public(X509EncodedKeySpec(der))
    """

    def __init__(self, algorithm: str):
        self.algorithm = algorithm

    @classmethod
    def get_instance(cls, algorithm: str) -> 'KeyFactory':
        """
        Raises:
            UnsupportedAlgorithm: Unless algorithm is "RSA" (any case)
        """
        _check_rsa(algorithm)
        return cls(RSA_ALGORITHM)

    def generate_public(self, spec: Union[X509EncodedKeySpec, bytes]) -> RSAPublicKey:
        if isinstance(spec, (bytes, bytearray)):
            return decode_public_key(spec)
        if not isinstance(spec, X509EncodedKeySpec):
            raise InvalidKeySpec(f"Unsupported key spec: {type(spec).__name__}")
        return decode_public_key(spec.encoded)

    def generate_private(self, spec: Union[PKCS8EncodedKeySpec, bytes]) -> RSAPrivateKey:
        if isinstance(spec, (bytes, bytearray)):
            return decode_private_key(spec)
        if not isinstance(spec, PKCS8EncodedKeySpec):
            raise InvalidKeySpec(f"Unsupported key spec: {type(spec).__name__}")
        return decode_private_key(spec.encoded)


class RSAKeyGenParameterSpec:
    """Key size and public exponent for KeyPairGenerator.initialize()."""

    F0 = BigInt.value_of(3)
    F4 = BigInt.value_of(65537)

    def __init__(self, key_size: int, public_exponent: BigInt = F4):
        self.key_size = key_size
        self.public_exponent = public_exponent

    def __repr__(self) -> str:
        return f"RSAKeyGenParameterSpec(key_size={self.key_size}, public_exponent={self.public_exponent})"


class KeyPairGenerator:
    """
    RSA key pair generator.

    Example:
        >>> generator = KeyPairGenerator.get_instance("RSA")
        >>> generator.initialize(1024)
        >>> pair = generator.generate_key_pair()
    """

    def __init__(self, algorithm: str):
        config = get_config()
        self.algorithm = algorithm
        self.key_size = config['default_key_size']
        self.public_exponent = BigInt.value_of(config['public_exponent'])
        self._rng: RandomSource = secrets.token_bytes

    @classmethod
    def get_instance(cls, algorithm: str) -> 'KeyPairGenerator':
        """
        Raises:
            UnsupportedAlgorithm: Unless algorithm is "RSA" (any case)
        """
        _check_rsa(algorithm)
        return cls(RSA_ALGORITHM)

    def initialize(self, params: Union[int, RSAKeyGenParameterSpec],
                   rng: Optional[RandomSource] = None) -> None:
        """Set the key size (int) or key size and exponent (spec)."""
        if isinstance(params, RSAKeyGenParameterSpec):
            self.key_size = params.key_size
            self.public_exponent = params.public_exponent
        else:
            self.key_size = int(params)
        if rng is not None:
            self._rng = rng

    def generate_key_pair(self, **overrides) -> KeyPair:
        """
        Generate a fresh key pair with the configured size and exponent.

        Args:
            **overrides: Settings forwarded to generate_rsa_keypair

        Raises:
            PrimeGenerationError: If generation gives up
        """
        material = generate_rsa_keypair(self.key_size, self.public_exponent, self._rng, **overrides)
        public = RSAPublicKey(modulus=material.modulus, public_exponent=material.public_exponent)
        private = RSAPrivateKey(
            modulus=material.modulus,
            private_exponent=material.private_exponent,
            public_exponent=material.public_exponent,
            prime_p=material.prime_p,
            prime_q=material.prime_q,
        )
        return KeyPair(public=public, private=private)
