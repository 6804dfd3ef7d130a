"""
purecrypt - Main Entry Point

Runs the published test vectors against this implementation and prints a
pass/fail report:

    python -m purecrypt.main
"""

import sys

from .cipher.rsa_cipher import decrypt, encrypt, generate_key_pair
from .core_crypto.aes import AES, decrypt_cbc, encrypt_cbc
from .core_crypto.bigint import BigInt
from .core_crypto.digest import hash_bytes


# (key, plaintext, expected ciphertext) - FIPS 197 Appendix C and the all-zero AES-128 vector
AES_VECTORS = [
    ("00000000000000000000000000000000", "00000000000000000000000000000000",
     "66e94bd4ef8a2c3b884cfa59ca342b2e"),
    ("000102030405060708090a0b0c0d0e0f", "00112233445566778899aabbccddeeff",
     "69c4e0d86a7b0430d8cdb78070b4c55a"),
    ("000102030405060708090a0b0c0d0e0f1011121314151617", "00112233445566778899aabbccddeeff",
     "dda97ca4864cdfe06eaf70a0ec0d7191"),
    ("000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f",
     "00112233445566778899aabbccddeeff", "8ea2b7ca516745bfeafc49904b496089"),
]

DIGEST_VECTORS = [
    ("MD5", b"", "d41d8cd98f00b204e9800998ecf8427e"),
    ("MD5", b"abc", "900150983cd24fb0d6963f7d28e17f72"),
    ("SHA-256", b"", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
    ("SHA-256", b"abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
]


def run_self_check(rsa_bits: int = 512) -> bool:
    """
    Check every primitive against known answers.

    Args:
        rsa_bits: Key size for the RSA round trip

    Returns:
        True if every check passed
    """
    results = []

    def check(name: str, passed: bool) -> None:
        results.append(passed)
        print(f"  [{'PASS' if passed else 'FAIL'}] {name}")

    print("=" * 60)
    print("purecrypt self-check")
    print("=" * 60)

    print("\nBigInt")
    check("4^13 mod 497 == 445",
          BigInt(4).mod_pow(BigInt(13), BigInt(497)) == BigInt(445))
    value = BigInt.from_decimal_string("-123456789012345678901234567890")
    check("two's-complement byte round trip", BigInt.from_bytes(value.to_bytes()) == value)

    print("\nDigests")
    for algorithm, data, expected in DIGEST_VECTORS:
        check(f"{algorithm}({data!r})", hash_bytes(algorithm, data).hex() == expected)

    print("\nAES")
    for key_hex, pt_hex, ct_hex in AES_VECTORS:
        aes = AES(bytes.fromhex(key_hex))
        check(f"AES-{aes.key_size} block", aes.encrypt_block(bytes.fromhex(pt_hex)).hex() == ct_hex)
    key, iv = bytes(range(32)), bytes(range(16))
    message = b"The quick brown fox jumps over the lazy dog"
    check("AES-CBC round trip", decrypt_cbc(key, iv, encrypt_cbc(key, iv, message)) == message)

    print(f"\nRSA ({rsa_bits}-bit)")
    public_der, private_der = generate_key_pair(rsa_bits)
    check("PKCS#1 v1.5 round trip", decrypt(private_der, encrypt(public_der, b"hello")) == b"hello")

    passed = all(results)
    print("\n" + "=" * 60)
    print(f"Overall: {'All checks passed!' if passed else 'Some checks failed!'}")
    return passed


def main():
    """Main entry point for purecrypt."""
    sys.exit(0 if run_self_check() else 1)


if __name__ == "__main__":
    main()
