import hashlib

from app.processor.exceptions import FingerprintError


def fingerprint(content: bytes, prefix_bytes: int = 1024) -> str:
    """Derive a cheap cache key from the first ``prefix_bytes`` of ``content``.

    Only meant for cache lookups: it is neither collision-free nor suitable for
    integrity checks.
    """
    if prefix_bytes <= 0:
        raise FingerprintError("prefix_bytes must be positive")
    if not content:
        raise FingerprintError("Cannot fingerprint an empty file")
    digest = hashlib.sha256(str(len(content)).encode("ascii"))
    digest.update(content[:prefix_bytes])
    return digest.hexdigest()[:32]
