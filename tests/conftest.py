"""Shared pytest fixtures."""

import pytest

from purecrypt.integration.event_logger import get_event_logger
from purecrypt.keys.rsa_keys import KeyPairGenerator


# Small enough to keep pure-Python key generation quick, large enough for PKCS#1
TEST_KEY_SIZE = 512


@pytest.fixture(scope="session")
def rsa_key_pair():
    """One RSA key pair shared by the whole test session."""
    generator = KeyPairGenerator.get_instance("RSA")
    generator.initialize(TEST_KEY_SIZE)
    return generator.generate_key_pair()


@pytest.fixture(scope="session")
def rsa_der_pair(rsa_key_pair):
    """(public X.509 DER, private PKCS#8 DER) of the session key pair."""
    return rsa_key_pair.public.encoded, rsa_key_pair.private.encoded


@pytest.fixture
def events():
    """Process-wide event logger with an empty history."""
    logger = get_event_logger()
    logger.clear()
    yield logger
    logger.clear()
