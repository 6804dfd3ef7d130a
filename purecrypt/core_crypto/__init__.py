# Core Cryptography Module
"""
Core cryptographic implementations including:
- BigInt arbitrary-precision arithmetic
- MD5 and SHA-256 streaming digests
- AES key scheduling and AES-CBC
- ASN.1 DER primitives
- RSA mathematics and PKCS#1 v1.5 padding
"""
