# Keys Module
"""
Key objects, encodings and generators:
- RSA public/private keys with X.509 / PKCS#8 DER encoding
- KeyFactory and KeyPairGenerator
- SecretKeySpec and IvParameterSpec for AES
"""
