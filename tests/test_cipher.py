"""
Unit tests for the Cipher facade and key holders.
"""

import os

import pytest

from purecrypt.cipher.cipher import Cipher, CipherFamily, CipherKey, KeyKind
from purecrypt.core_crypto.aes import encrypt_cbc
from purecrypt.errors import (
    CipherStateError, InvalidCiphertextLength, InvalidKeyLength, UnsupportedAlgorithm
)
from purecrypt.integration.event_logger import EventType
from purecrypt.keys.secret_key import IvParameterSpec, SecretKeySpec


AES_TRANSFORMATION = "AES/CBC/PKCS5Padding"
RSA_TRANSFORMATION = "RSA/ECB/PKCS1Padding"


class TestGetInstance:
    """Transformation string dispatch."""

    @pytest.mark.parametrize("transformation,family", [
        ("AES/CBC/PKCS5Padding", CipherFamily.AES),
        ("aes", CipherFamily.AES),
        ("RSA/ECB/PKCS1Padding", CipherFamily.RSA),
        ("rsa", CipherFamily.RSA),
        ("RSA/AES/hybrid", CipherFamily.RSA),
    ])
    def test_family(self, transformation, family):
        """RSA wins when both names appear."""
        cipher = Cipher.get_instance(transformation)
        assert cipher.family is family
        assert cipher.algorithm == family.value
        assert cipher.transformation == transformation

    @pytest.mark.parametrize("transformation", ["DES/CBC/PKCS5Padding", "Blowfish", "", None])
    def test_unsupported(self, transformation):
        with pytest.raises(UnsupportedAlgorithm):
            Cipher.get_instance(transformation)

    def test_block_size(self):
        assert Cipher.get_instance(AES_TRANSFORMATION).get_block_size() == 16
        assert Cipher.get_instance(RSA_TRANSFORMATION).get_block_size() == 0


class TestAESCipher:
    """AES through the facade."""

    def test_round_trip_with_iv(self):
        key, iv = os.urandom(32), os.urandom(16)
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(key, "AES"), IvParameterSpec(iv))
        ciphertext = cipher.do_final(b"facade round trip")
        assert ciphertext == encrypt_cbc(key, iv, b"facade round trip")

        cipher.init(Cipher.DECRYPT_MODE, SecretKeySpec(key, "AES"), IvParameterSpec(iv))
        assert cipher.do_final(ciphertext) == b"facade round trip"
        assert cipher.mode == Cipher.DECRYPT_MODE

    def test_default_iv_is_zero(self):
        key = bytes(16)
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(key))
        assert cipher.get_iv() == bytes(16)
        assert cipher.do_final(b"abc") == encrypt_cbc(key, bytes(16), b"abc")

    def test_do_final_is_repeatable(self):
        """Same key, mode and IV after do_final."""
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(24)), IvParameterSpec(bytes(16)))
        assert cipher.do_final(b"again") == cipher.do_final(b"again")

    def test_update_buffers_input(self):
        """update() returns nothing; do_final() covers everything buffered."""
        key, iv = bytes(16), bytes(range(16))
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(key), IvParameterSpec(iv))
        assert cipher.update(b"part one, ") == b""
        assert cipher.update(b"part two") == b""
        assert cipher.do_final() == encrypt_cbc(key, iv, b"part one, part two")
        # Buffer is drained
        assert cipher.do_final(b"x") == encrypt_cbc(key, iv, b"x")

    @pytest.mark.parametrize("size", [0, 8, 15, 33])
    def test_bad_key_length(self, size):
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        with pytest.raises(InvalidKeyLength):
            cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(size)))

    def test_bad_iv_length(self):
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        with pytest.raises(InvalidKeyLength):
            cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(16)), IvParameterSpec(bytes(12)))

    def test_raw_iv_bytes_rejected(self):
        """Params must be an IvParameterSpec, not bare bytes."""
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        with pytest.raises(CipherStateError):
            cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(16)), bytes(16))

    def test_unaligned_ciphertext(self):
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        cipher.init(Cipher.DECRYPT_MODE, SecretKeySpec(bytes(16)))
        with pytest.raises(InvalidCiphertextLength):
            cipher.do_final(bytes(20))

    def test_rsa_key_rejected(self, rsa_key_pair):
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        with pytest.raises(CipherStateError):
            cipher.init(Cipher.ENCRYPT_MODE, rsa_key_pair.public)


class TestRSACipher:
    """RSA through the facade."""

    def test_round_trip(self, rsa_key_pair):
        cipher = Cipher.get_instance(RSA_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, rsa_key_pair.public)
        ciphertext = cipher.do_final(b"facade")
        assert len(ciphertext) == 64
        assert cipher.get_iv() is None

        cipher.init(Cipher.DECRYPT_MODE, rsa_key_pair.private)
        assert cipher.do_final(ciphertext) == b"facade"

    def test_wrong_key_kind_for_mode(self, rsa_key_pair):
        """Encrypt needs the public key, decrypt the private one."""
        cipher = Cipher.get_instance(RSA_TRANSFORMATION)
        with pytest.raises(CipherStateError):
            cipher.init(Cipher.DECRYPT_MODE, rsa_key_pair.public)
        with pytest.raises(CipherStateError):
            cipher.init(Cipher.ENCRYPT_MODE, rsa_key_pair.private)
        with pytest.raises(CipherStateError):
            cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(16)))

    def test_custom_rng(self, rsa_key_pair):
        """A fixed byte source gives deterministic padding."""
        cipher = Cipher.get_instance(RSA_TRANSFORMATION)
        cipher.init(Cipher.ENCRYPT_MODE, rsa_key_pair.public, rng=lambda n: b"\x07" * n)
        assert cipher.do_final(b"m") == cipher.do_final(b"m")


class TestCipherState:
    """Lifecycle errors and events."""

    def test_do_final_before_init(self):
        with pytest.raises(CipherStateError):
            Cipher.get_instance(AES_TRANSFORMATION).do_final(b"data")

    def test_update_before_init(self):
        with pytest.raises(CipherStateError):
            Cipher.get_instance(RSA_TRANSFORMATION).update(b"data")

    @pytest.mark.parametrize("mode", [0, 3, -1])
    def test_bad_mode(self, mode):
        with pytest.raises(ValueError):
            Cipher.get_instance(AES_TRANSFORMATION).init(mode, SecretKeySpec(bytes(16)))

    def test_unsupported_key_type(self):
        with pytest.raises(CipherStateError):
            Cipher.get_instance(AES_TRANSFORMATION).init(Cipher.ENCRYPT_MODE, b"raw key bytes")

    def test_init_records_event(self, events):
        """Only the transformation and mode are logged."""
        Cipher.get_instance(AES_TRANSFORMATION).init(Cipher.DECRYPT_MODE, SecretKeySpec(bytes(16)))
        [event] = events.history(EventType.CIPHER_INIT)
        assert event.details == {"transformation": AES_TRANSFORMATION, "mode": "decrypt"}

    def test_repr(self):
        cipher = Cipher.get_instance(AES_TRANSFORMATION)
        assert "uninitialized" in repr(cipher)
        cipher.init(Cipher.ENCRYPT_MODE, SecretKeySpec(bytes(16)))
        assert "encrypt" in repr(cipher)


class TestKeyHolders:
    """SecretKeySpec, IvParameterSpec and CipherKey."""

    def test_secret_key_slice(self):
        spec = SecretKeySpec(b"xx" + bytes(16) + b"yy", "AES", offset=2, length=16)
        assert spec.encoded == bytes(16)
        assert spec.format == "RAW"
        assert spec.algorithm == "AES"

    def test_secret_key_bad_range(self):
        with pytest.raises(ValueError):
            SecretKeySpec(bytes(8), "AES", offset=4, length=8)

    def test_secret_key_equality(self):
        assert SecretKeySpec(bytes(16), "AES") == SecretKeySpec(bytes(16), "aes")
        assert SecretKeySpec(bytes(16)) != SecretKeySpec(b"\x01" * 16)
        assert len({SecretKeySpec(bytes(16)), SecretKeySpec(bytes(16))}) == 1

    def test_secret_key_repr_hides_bytes(self):
        text = repr(SecretKeySpec(b"\xab" * 16))
        assert "bits=128" in text
        assert "abab" not in text and "\\xab" not in text

    def test_iv_copy_and_slice(self):
        buffer = bytearray(range(32))
        spec = IvParameterSpec(buffer, 16)
        buffer[16] = 0xFF
        assert spec.iv == bytes(range(16, 32))

    def test_iv_validate(self):
        with pytest.raises(InvalidKeyLength):
            IvParameterSpec(bytes(8)).validate()

    def test_cipher_key_variants(self, rsa_key_pair):
        assert CipherKey.wrap(rsa_key_pair.public).kind is KeyKind.RSA_PUBLIC
        assert CipherKey.wrap(rsa_key_pair.private).kind is KeyKind.RSA_PRIVATE
        aes_key = CipherKey.wrap(SecretKeySpec(bytes(16)))
        assert aes_key.kind is KeyKind.AES
        assert aes_key.secret == bytes(16)
        assert CipherKey.wrap(aes_key) is aes_key
