"""
Digest Registry

Looks up streaming hash engines by name and exposes the handle-style API:

    handle = create("SHA-256")
    update(handle, b"part one")
    update(handle, b"part two")
    finish(handle)  # 32 bytes, handle is reset and reusable

Recognised names (case-insensitive): "MD5", "SHA-256", "SHA256".
"""

from typing import Dict, Optional, Type

from ..errors import UnsupportedAlgorithm
from .block_digest import BlockDigest
from .md5 import MD5
from .sha256 import SHA256


DigestHandle = BlockDigest

_ALGORITHMS: Dict[str, Type[BlockDigest]] = {
    "MD5": MD5,
    "SHA-256": SHA256,
    "SHA256": SHA256,
}


def get_instance(algorithm: str) -> BlockDigest:
    """
    Create a fresh digest for the named algorithm.

    Args:
        algorithm: "MD5", "SHA-256" or "SHA256" (any case)

    Returns:
        New digest in its initial state

    Raises:
        UnsupportedAlgorithm: For any other name
    """
    digest_class = _ALGORITHMS.get(algorithm.upper()) if isinstance(algorithm, str) else None
    if digest_class is None:
        raise UnsupportedAlgorithm(f"Unsupported digest algorithm: {algorithm}", detail=str(algorithm))
    return digest_class()


def available_algorithms():
    """Canonical names of the registered digests."""
    return sorted({cls.algorithm for cls in _ALGORITHMS.values()})


def create(algorithm: str) -> DigestHandle:
    """Same as get_instance(); returns a handle for update()/finish()."""
    return get_instance(algorithm)


def update(handle: DigestHandle, data: bytes, offset: int = 0, length: Optional[int] = None) -> None:
    """Absorb data into the handle."""
    handle.update(data, offset, length)


def finish(handle: DigestHandle) -> bytes:
    """Finish the hash (16 bytes for MD5, 32 for SHA-256) and reset the handle."""
    return handle.digest()


def hash_bytes(algorithm: str, data: bytes) -> bytes:
    """One-shot digest of data with the named algorithm."""
    return get_instance(algorithm).digest(data)
