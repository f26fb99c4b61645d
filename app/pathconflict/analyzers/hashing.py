"""Content hashing of executables."""

import hashlib
import logging

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def compute_hash(path: str) -> bytes | None:
    """Compute the SHA-256 digest of a file.

    Args:
        path: File to hash.

    Returns:
        Raw digest bytes, or None if the file cannot be read.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(_CHUNK_SIZE):
                digest.update(chunk)
    except OSError as e:
        logger.debug("Cannot hash %s: %s", path, e)
        return None
    return digest.digest()
