# purecrypt Test Suite
"""
Test suite including:
- Unit tests per primitive (BigInt, digests, AES, DER, RSA, Cipher)
- Interoperability checks against hashlib and the cryptography package
- Integration tests
- Security tests (invalid inputs, tampering)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
