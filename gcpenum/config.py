from dataclasses import dataclass, field

API_BASE = "https://www.googleapis.com/storage/v1/b"
PUBLIC_BASE = "https://storage.googleapis.com"
DEFAULT_CONCURRENCY = 10
DEFAULT_TIMEOUT = 10.0

# 403 bodies containing any of these are indistinguishable from a missing bucket.
DEFAULT_DENIAL_PHRASES = ("Access denied", "does not have")


@dataclass
class ScanConfig:
    concurrency: int = DEFAULT_CONCURRENCY
    verbose: bool = False
    timeout: float = DEFAULT_TIMEOUT
    denial_phrases: tuple = field(default=DEFAULT_DENIAL_PHRASES)
    api_base: str = API_BASE
    public_base: str = PUBLIC_BASE

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        # An empty phrase would match every 403 body.
        self.denial_phrases = tuple(phrase for phrase in self.denial_phrases if phrase)

    def metadata_url(self, bucket: str) -> str:
        return f"{self.api_base}/{bucket}"

    def objects_url(self, bucket: str) -> str:
        return f"{self.api_base}/{bucket}/o"

    def public_url(self, bucket: str) -> str:
        return f"{self.public_base}/{bucket}/"
