#!/usr/bin/env python
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                          PURECRYPT LIVE DEMO                                 ║
╚══════════════════════════════════════════════════════════════════════════════╝

This script walks through purecrypt's primitives step by step:
- BigInt arithmetic and modular exponentiation
- MD5 / SHA-256 streaming digests
- AES-CBC encryption through the Cipher facade
- RSA key generation, DER keys and PKCS#1 v1.5 encryption
- OpenSSL-compatible "Salted__" envelopes
"""

import sys
import time

from purecrypt.cipher.cipher import Cipher
from purecrypt.core_crypto.bigint import BigInt
from purecrypt.core_crypto.digest import create, finish, update
from purecrypt.files.openssl_envelope import decrypt_salted, encrypt_salted
from purecrypt.integration.event_logger import EventType, get_event_logger
from purecrypt.keys.rsa_keys import KeyFactory, KeyPairGenerator, X509EncodedKeySpec
from purecrypt.keys.secret_key import IvParameterSpec, SecretKeySpec


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if "--no-pause" in sys.argv:
        return
    print(f"\n  [PAUSE] {message}")
    input()


def main():
    events = get_event_logger()

    print("\n" * 2)
    print("╔" + "═" * 68 + "╗")
    print("║" + "PURECRYPT - CRYPTOGRAPHY FROM FIRST PRINCIPLES".center(68) + "║")
    print("╚" + "═" * 68 + "╝")

    pause("Press ENTER to begin the demonstration...")

    print_header("PART 1: BIGINT")

    print_step("1.1", "Textbook modular exponentiation")
    result = BigInt(4).mod_pow(BigInt(13), BigInt(497))
    print(f"  4^13 mod 497 = {result}")

    print_step("1.2", "Two's-complement bytes")
    for text in ("255", "-129", "0"):
        value = BigInt.from_decimal_string(text)
        print(f"  {text:>5} -> {value.to_bytes().hex()}")

    print_step("1.3", "A 256-bit probable prime")
    start = time.time()
    prime = BigInt.probable_prime(256)
    print(f"  {prime.to_string(16)}")
    print(f"  ({prime.bit_length()} bits, {time.time() - start:.2f}s)")

    pause()

    print_header("PART 2: DIGESTS")

    for algorithm in ("MD5", "SHA-256"):
        handle = create(algorithm)
        update(handle, b"a")
        update(handle, b"bc")
        print(f"  {algorithm:8} abc -> {finish(handle).hex()}")

    pause()

    print_header("PART 3: AES-CBC")

    key = SecretKeySpec(bytes(range(32)), "AES")
    iv = IvParameterSpec(bytes(range(16)))
    message = b"Attack at dawn, bring snacks."

    cipher = Cipher.get_instance("AES/CBC/PKCS5Padding")
    cipher.init(Cipher.ENCRYPT_MODE, key, iv)
    ciphertext = cipher.do_final(message)
    print(f"  Plaintext:  {message!r}")
    print(f"  Ciphertext: {ciphertext.hex()}")

    cipher.init(Cipher.DECRYPT_MODE, key, iv)
    print(f"  Decrypted:  {cipher.do_final(ciphertext)!r}")

    pause()

    print_header("PART 4: RSA")

    print_step("4.1", "Generating a 1024-bit key pair")
    start = time.time()
    generator = KeyPairGenerator.get_instance("RSA")
    generator.initialize(1024)
    pair = generator.generate_key_pair()
    print(f"  {pair.public} in {time.time() - start:.2f}s")

    print_step("4.2", "X.509 public key")
    der = pair.public.encoded
    print(f"  {len(der)} bytes: {der[:24].hex()}...")
    reloaded = KeyFactory.get_instance("RSA").generate_public(X509EncodedKeySpec(der))
    print(f"  Re-parsed key equal: {reloaded == pair.public}")

    print_step("4.3", "PKCS#1 v1.5 encryption")
    rsa = Cipher.get_instance("RSA/ECB/PKCS1Padding")
    rsa.init(Cipher.ENCRYPT_MODE, pair.public)
    secret = rsa.do_final(b"session key")
    rsa.init(Cipher.DECRYPT_MODE, pair.private)
    print(f"  Ciphertext: {secret[:24].hex()}...")
    print(f"  Decrypted:  {rsa.do_final(secret)!r}")

    pause()

    print_header("PART 5: OPENSSL ENVELOPE")

    envelope = encrypt_salted("hello from purecrypt", "correct horse", as_base64=True)
    print(f"  openssl enc -aes-256-cbc -md md5 -a: {envelope}")
    print(f"  Decrypted: {decrypt_salted(envelope, 'correct horse')!r}")

    print_header("EVENTS RECORDED")
    for event in events.history():
        if event.event_type in (EventType.KEYPAIR_GENERATED, EventType.CIPHER_INIT):
            print(f"  {event}")


if __name__ == "__main__":
    main()
