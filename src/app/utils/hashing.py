import hashlib
import hmac


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hashes_match(supplied_hash: str, stored_hash: str) -> bool:
    """Constant-time comparison of two hex digests"""
    return hmac.compare_digest(supplied_hash.encode("ascii"), (stored_hash or "").encode("ascii"))
