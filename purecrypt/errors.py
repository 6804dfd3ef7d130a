"""
Exception hierarchy for purecrypt.

Every error raised by the library derives from CryptoError. Each kind also
inherits the closest built-in exception, so ``except ValueError`` or
``except ZeroDivisionError`` keeps working for callers that do not import
this module.
"""

from typing import Optional


class CryptoError(Exception):
    """Base exception for all purecrypt errors."""

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            detail: Optional extra context (algorithm name, offending tag, ...)
        """
        self.detail = detail
        super().__init__(message)


# ============================================================================
# Arithmetic
# ============================================================================

class DivisionByZero(CryptoError, ZeroDivisionError):
    """BigInt division or reduction by zero."""
    pass


class NonPositiveModulus(CryptoError, ArithmeticError):
    """Modular operation requested with a modulus <= 0."""
    pass


class NotInvertible(CryptoError, ArithmeticError):
    """Value has no inverse for the given modulus."""
    pass


class PrimeGenerationError(CryptoError, RuntimeError):
    """Prime search gave up after the configured number of candidates."""
    pass


# ============================================================================
# Algorithms and keys
# ============================================================================

class UnsupportedAlgorithm(CryptoError, ValueError):
    """Unknown digest, key factory or cipher transformation requested."""
    pass


class InvalidKeySpec(CryptoError, ValueError):
    """Malformed DER key encoding."""
    pass


class InvalidKeyLength(CryptoError, ValueError):
    """AES key or IV of an unsupported size."""
    pass


# ============================================================================
# Cipher operations
# ============================================================================

class DataTooLong(CryptoError, ValueError):
    """RSA plaintext longer than k - 11 bytes."""
    pass


class InvalidPadding(CryptoError, ValueError):
    """PKCS#1 (or strict PKCS#7) padding check failed."""
    pass


class InvalidCiphertextLength(CryptoError, ValueError):
    """AES ciphertext empty or not a multiple of the block size."""
    pass


class CipherStateError(CryptoError, RuntimeError):
    """Cipher used before init, or with a key that does not fit the mode."""
    pass
