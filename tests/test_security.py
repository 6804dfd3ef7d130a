"""
Security tests for purecrypt.

Tests specifically for security-related scenarios:
- Invalid inputs
- Tampered ciphertext and keys
- Edge cases
"""

import os

import pytest

from purecrypt import BigInt, Cipher, SecretKeySpec
from purecrypt.cipher import rsa_cipher
from purecrypt.config import get_config
from purecrypt.core_crypto.aes import decrypt_cbc, encrypt_cbc
from purecrypt.errors import (
    CryptoError, DataTooLong, DivisionByZero, InvalidKeySpec, InvalidPadding,
    NonPositiveModulus, UnsupportedAlgorithm
)
from purecrypt.integration.event_logger import EventType


class TestTamperedRSA:
    """Modified ciphertexts and keys."""

    def test_flipped_ciphertext_rejected_or_changed(self, rsa_der_pair):
        """A bit flip never yields the original plaintext."""
        public_der, private_der = rsa_der_pair
        ciphertext = bytearray(rsa_cipher.encrypt(public_der, b"top secret"))
        ciphertext[-1] ^= 0x01
        try:
            recovered = rsa_cipher.decrypt(private_der, bytes(ciphertext))
        except InvalidPadding:
            return
        assert recovered != b"top secret"

    def test_zero_ciphertext(self, rsa_der_pair, events):
        """0^d = 0 has no PKCS#1 structure."""
        with pytest.raises(InvalidPadding):
            rsa_cipher.decrypt(rsa_der_pair[1], bytes(64))
        [event] = events.history(EventType.RSA_PADDING_REJECTED)
        assert "reason" in event.details

    def test_truncated_public_key(self, rsa_der_pair):
        public_der = rsa_der_pair[0]
        for cut in (1, 10, len(public_der) // 2, len(public_der) - 1):
            with pytest.raises(InvalidKeySpec):
                rsa_cipher.encrypt(public_der[:cut], b"data")

    def test_corrupted_oid(self, rsa_der_pair):
        """Another algorithm's OID is refused."""
        public_der = bytearray(rsa_der_pair[0])
        oid_at = bytes(public_der).find(bytes.fromhex("2a864886f70d010101"))
        public_der[oid_at + 8] = 0x05
        with pytest.raises(InvalidKeySpec):
            rsa_cipher.encrypt(bytes(public_der), b"data")

    def test_negative_modulus_rejected(self):
        from purecrypt.core_crypto.der import encode_bit_string, encode_integer, encode_sequence
        from purecrypt.keys.rsa_keys import _algorithm_identifier, decode_public_key
        body = encode_sequence(encode_integer(BigInt(-77)), encode_integer(BigInt(3)))
        with pytest.raises(InvalidKeySpec):
            decode_public_key(encode_sequence(_algorithm_identifier(), encode_bit_string(body)))

    def test_empty_plaintext_round_trip(self, rsa_der_pair):
        public_der, private_der = rsa_der_pair
        assert rsa_cipher.decrypt(private_der, rsa_cipher.encrypt(public_der, b"")) == b""

    def test_message_limit_is_k_minus_11(self, rsa_der_pair):
        with pytest.raises(DataTooLong):
            rsa_cipher.encrypt(rsa_der_pair[0], os.urandom(64))


class TestTamperedAES:
    """CBC integrity is not provided; tampering must not crash."""

    def test_last_block_tamper_permissive(self, events):
        key, iv = os.urandom(16), os.urandom(16)
        ciphertext = bytearray(encrypt_cbc(key, iv, b"sixteen byte msg"))
        ciphertext[-17] ^= 0xFF  # corrupts the final pad byte through CBC
        result = decrypt_cbc(key, iv, bytes(ciphertext))
        assert result != b"sixteen byte msg"

    def test_tamper_strict_raises(self):
        key, iv = bytes(16), bytes(16)
        ciphertext = bytearray(encrypt_cbc(key, iv, b"sixteen byte msg"))
        # Flip pad byte 0x10 to 0x11 in the final block
        ciphertext[-17] ^= 0x01
        with pytest.raises(InvalidPadding):
            decrypt_cbc(key, iv, bytes(ciphertext), strict=True)

    def test_wrong_key_never_returns_plaintext(self):
        iv = os.urandom(16)
        ciphertext = encrypt_cbc(bytes(32), iv, b"confidential")
        assert decrypt_cbc(b"\x01" * 32, iv, ciphertext) != b"confidential"


class TestInvalidInputs:
    """Arguments outside the supported domain."""

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            BigInt(10).divide(BigInt(0))
        with pytest.raises(ZeroDivisionError):
            BigInt(10).remainder(BigInt(0))

    @pytest.mark.parametrize("modulus", [0, -7])
    def test_non_positive_modulus(self, modulus):
        with pytest.raises(NonPositiveModulus):
            BigInt(3).mod_pow(BigInt(2), BigInt(modulus))

    def test_errors_share_base_class(self):
        for error in (UnsupportedAlgorithm, InvalidKeySpec, DataTooLong, InvalidPadding):
            assert issubclass(error, CryptoError)
            assert issubclass(error, ValueError)

    def test_error_detail(self):
        with pytest.raises(UnsupportedAlgorithm) as exc:
            Cipher.get_instance("DES")
        assert exc.value.detail == "DES"

    def test_unknown_config_override(self):
        with pytest.raises(KeyError):
            get_config(no_such_setting=1)

    def test_miller_rabin_rounds_floor(self):
        """Fewer than 20 rounds is never used."""
        assert get_config(miller_rabin_rounds=1)['miller_rabin_rounds'] == 20
        assert get_config(miller_rabin_rounds=40)['miller_rabin_rounds'] == 40

    def test_string_key_type_rejected(self):
        cipher = Cipher.get_instance("AES")
        with pytest.raises(CryptoError):
            cipher.init(Cipher.ENCRYPT_MODE, "0123456789abcdef")

    def test_aes_key_from_bytearray_is_copied(self):
        buffer = bytearray(16)
        spec = SecretKeySpec(buffer)
        buffer[0] = 1
        assert spec.encoded == bytes(16)
