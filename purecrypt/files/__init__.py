# Files Module
"""
Password-based envelopes compatible with OpenSSL and CryptoJS:
- EVP_BytesToKey key/IV derivation (MD5 by default)
- "Salted__" AES-CBC envelopes, raw or base64
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import of the envelope API."""
    from . import openssl_envelope
    return getattr(openssl_envelope, name)

__all__ = [
    'SaltedHeader',
    'evp_bytes_to_key',
    'encrypt_salted',
    'decrypt_salted',
    'MAGIC_BYTES',
    'SALT_SIZE',
]
