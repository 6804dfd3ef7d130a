# Cipher Module
"""
Cipher facade over RSA (PKCS#1 v1.5) and AES-CBC, plus DER-level RSA helpers.
"""
