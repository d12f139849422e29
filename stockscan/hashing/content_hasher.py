import hashlib


class ContentHasher:
    """SHA-256 digest of processed document bytes, hex-encoded."""

    ALGORITHM = "sha256"

    def hash(self, content: bytes) -> str:
        return hashlib.new(self.ALGORITHM, content).hexdigest()
