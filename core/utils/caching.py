"""Cache key helpers."""

import hashlib


def generate_cache_key(*parts: str) -> str:
    """Generate a SHA256 cache key from parts.

    Parts are joined with a separator that cannot be confused with the
    boundary between two parts ("a:b" + "c" differs from "a" + "b:c").
    """
    hasher = hashlib.sha256()
    for part in parts:
        encoded = part.encode("utf-8")
        hasher.update(len(encoded).to_bytes(8, "big"))
        hasher.update(encoded)
    return hasher.hexdigest()
