"""
Library-wide constants and tunables.

Call sites that accept keyword overrides copy CRYPTO_CONFIG and update the
copy, so the defaults here are never mutated at runtime.
"""

# Limb arithmetic
LIMB_BITS = 32
MASK_32 = 0xFFFFFFFF

# Block cipher / digest geometry
AES_BLOCK_SIZE = 16
AES_KEY_SIZES = (16, 24, 32)
DIGEST_BLOCK_SIZE = 64

# RSA
F4 = 65537
PKCS1_OVERHEAD = 11
MIN_MILLER_RABIN_ROUNDS = 20

CRYPTO_CONFIG = {
    'miller_rabin_rounds': MIN_MILLER_RABIN_ROUNDS,
    'max_prime_attempts': 100_000,
    'max_keypair_attempts': 64,
    'default_key_size': 2048,
    'public_exponent': F4,
    'strict_aes_padding': False,
}


def get_config(**overrides) -> dict:
    """
    Return a copy of CRYPTO_CONFIG with keyword overrides applied.

    Raises:
        KeyError: If an override names an unknown setting
    """
    config = CRYPTO_CONFIG.copy()
    for name in overrides:
        if name not in config:
            raise KeyError(f"Unknown setting: {name}")
    config.update(overrides)
    if config['miller_rabin_rounds'] < MIN_MILLER_RABIN_ROUNDS:
        config['miller_rabin_rounds'] = MIN_MILLER_RABIN_ROUNDS
    return config
